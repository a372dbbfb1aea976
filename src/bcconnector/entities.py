"""
Business Central API v2.0 records

Attribute names are snake_case; the camelCase wire names are declared as aliases.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BCRecord(BaseModel):
    """Base for API records: alias-aware, tolerant of extra wire fields"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Company(BCRecord):
    id: str
    system_version: Optional[str] = Field(default=None, alias="systemVersion")
    name: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    business_profile_id: Optional[str] = Field(default=None, alias="businessProfileId")


class Customer(BCRecord):
    id: str
    number: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    type: Optional[str] = None
    address_line1: Optional[str] = Field(default=None, alias="addressLine1")
    address_line2: Optional[str] = Field(default=None, alias="addressLine2")
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = Field(default=None, alias="postalCode")
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    email: Optional[str] = None
    website: Optional[str] = None
    salesperson_code: Optional[str] = Field(default=None, alias="salespersonCode")
    balance_due: Optional[Decimal] = Field(default=None, alias="balanceDue")
    credit_limit: Optional[Decimal] = Field(default=None, alias="creditLimit")
    tax_liable: Optional[bool] = Field(default=None, alias="taxLiable")
    tax_area_id: Optional[str] = Field(default=None, alias="taxAreaId")
    tax_registration_number: Optional[str] = Field(default=None, alias="taxRegistrationNumber")
    currency_code: Optional[str] = Field(default=None, alias="currencyCode")
    payment_terms_id: Optional[str] = Field(default=None, alias="paymentTermsId")
    shipment_method_id: Optional[str] = Field(default=None, alias="shipmentMethodId")
    payment_method_id: Optional[str] = Field(default=None, alias="paymentMethodId")
    blocked: Optional[str] = None
    last_modified_date_time: Optional[str] = Field(default=None, alias="lastModifiedDateTime")


class Vendor(BCRecord):
    id: Optional[str] = None
    number: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    address_line1: Optional[str] = Field(default=None, alias="addressLine1")
    address_line2: Optional[str] = Field(default=None, alias="addressLine2")
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = Field(default=None, alias="postalCode")
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    email: Optional[str] = None
    payment_terms_id: Optional[str] = Field(default=None, alias="paymentTermsId")
    balance: Optional[Decimal] = None


class Item(BCRecord):
    id: str
    number: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    description: Optional[str] = None


class ItemDetail(Item):
    type: Optional[str] = None
    item_category_code: Optional[str] = Field(default=None, alias="itemCategoryCode")
    blocked: Optional[bool] = None
    base_unit_of_measure_id: Optional[str] = Field(default=None, alias="baseUnitOfMeasureId")
    base_unit_of_measure_code: Optional[str] = Field(default=None, alias="baseUnitOfMeasureCode")
    gtin: Optional[str] = None
    unit_price: Optional[Decimal] = Field(default=None, alias="unitPrice")
    unit_cost: Optional[Decimal] = Field(default=None, alias="unitCost")
    inventory: Optional[Decimal] = None
    last_modified_date_time: Optional[str] = Field(default=None, alias="lastModifiedDateTime")


class SalesOrder(BCRecord):
    id: str
    number: Optional[str] = None
    customer_number: Optional[str] = Field(default=None, alias="customerNumber")
    customer_name: Optional[str] = Field(default=None, alias="customerName")
    order_date: Optional[str] = Field(default=None, alias="orderDate")
    status: Optional[str] = None
    currency_code: Optional[str] = Field(default=None, alias="currencyCode")
    total_amount_excluding_tax: Optional[Decimal] = Field(
        default=None, alias="totalAmountExcludingTax"
    )
    total_amount_including_tax: Optional[Decimal] = Field(
        default=None, alias="totalAmountIncludingTax"
    )


class BCEnvironment(BCRecord):
    """Entry of the environments discovery endpoint"""

    name: str
    aad_tenant_id: Optional[str] = Field(default=None, alias="aadTenantId")
    application_family: Optional[str] = Field(default=None, alias="applicationFamily")
    type: Optional[str] = None
    country_code: Optional[str] = Field(default=None, alias="countryCode")
