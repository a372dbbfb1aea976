#!/usr/bin/env python3
"""
Manual Business Central Smoke Test

Signs in (interactively if no usable refresh token is stored), then lists
companies, the first page of customers and one item picture so you can see
the whole token/REST path working against a real tenant.

Usage:
    python scripts/manual_smoke.py

Requirements:
    - Valid .env file with AZURE_TENANT_ID, AZURE_CLIENT_ID and BC_ENVIRONMENT
    - Network access to login.microsoftonline.com and api.businesscentral.dynamics.com
"""

import asyncio
import sys
import time
from pathlib import Path

# Add src to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from dotenv import load_dotenv
load_dotenv()


async def main():
    """Run a sign-in plus a few read-only requests"""
    from bcconnector.auth import ConsoleCodeSource
    from bcconnector.client import ODataQuery
    from bcconnector.config import get_settings
    from bcconnector.di_container import DIContainer
    from bcconnector.errors import ApiError

    print('🚀 Starting Business Central smoke test...')

    settings = get_settings()
    print(f'   Tenant: {settings.azure_tenant_id}')
    print(f'   Environment: {settings.bc_environment}')
    print(f'   Secure store: {settings.secure_store}')

    try:
        async with DIContainer(settings, code_source=ConsoleCodeSource()) as container:
            token_store = container.get_token_store()
            client = container.get_client()

            print('\n🔐 Getting access token...')
            start_time = time.time()
            await token_store.get_access_token()
            print(f'✅ Token ready in {time.time() - start_time:.1f} seconds '
                  f'(expires {token_store.token.expires_at:%Y-%m-%d %H:%M} UTC)')

            print('\n🏢 Companies:')
            companies = await client.list_companies()
            for i, company in enumerate(companies, 1):
                print(f'   {i:2d}. {company.display_name or company.name} ({company.id})')

            if not settings.bc_company_id:
                print('\n⚠️  BC_COMPANY_ID is not set; skipping company-scoped requests')
                return

            print('\n👥 Customers (first 10):')
            customers = await client.list_customers(ODataQuery(top=10, orderby='number'))
            for customer in customers:
                number = customer.number or ''
                print(f'   {number:>10}  {customer.display_name}')

            items = await client.list_items(ODataQuery(top=1))
            if items:
                picture = await client.item_picture(items[0].id)
                print(f'\n🖼️  Picture of item {items[0].number}: {len(picture):,} bytes')

            print('\n🎯 Smoke test passed')

    except ApiError as e:
        print(f'\n❌ {type(e).__name__}: {e.message}')
        if e.details:
            print(f'   Details: {e.details}')
        sys.exit(1)
    except KeyboardInterrupt:
        print('\n⚠️  Cancelled by user')
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
