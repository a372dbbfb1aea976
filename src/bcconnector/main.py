"""
BCConnector command line

Sign in to Business Central and dump records as JSON.
"""

import argparse
import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional
import structlog

from .auth import ConsoleCodeSource
from .client import BusinessCentralClient, ODataQuery
from .config import get_settings, load_dotenv_if_exists
from .di_container import DIContainer
from .errors import ApiError

logger = structlog.get_logger(__name__)


def configure_logging(log_level: str = "info") -> None:
    """Configure structured logging"""
    level = getattr(logging, log_level.upper())
    logging.basicConfig(level=level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


ENTITY_FETCHERS: Dict[str, Callable[[BusinessCentralClient, Optional[ODataQuery]], Awaitable[List[Any]]]] = {
    "companies": BusinessCentralClient.list_companies,
    "customers": BusinessCentralClient.list_customers,
    "vendors": BusinessCentralClient.list_vendors,
    "items": BusinessCentralClient.list_items,
    "salesOrders": BusinessCentralClient.list_sales_orders,
}


def _print_records(records: List[Any]) -> None:
    print(json.dumps([r.model_dump(mode="json", by_alias=True) for r in records], indent=2))


async def validate_configuration() -> int:
    """Validate configuration without touching the network"""
    print("🔧 Validating BCConnector configuration...")

    settings = get_settings()
    async with DIContainer(settings) as container:
        client = container.get_client()
        info = client.get_client_info()

        print("✅ Configuration loaded")
        print(f"   - Tenant: {settings.azure_tenant_id or '<missing>'}")
        print(f"   - Client ID: {settings.azure_client_id or '<missing>'}")
        print(f"   - Environment: {settings.bc_environment}")
        print(f"   - Company: {settings.bc_company_name or settings.bc_company_id or '<none>'}")
        print(f"   - API base: {info['base_url'] or '<invalid>'}")
        store_location = (
            f" ({settings.secure_store_path_resolved})" if settings.secure_store == "sqlite" else ""
        )
        print(f"   - Secure store: {settings.secure_store}{store_location}")

        problems = []
        if not settings.azure_tenant_id:
            problems.append("AZURE_TENANT_ID is not set")
        if not settings.azure_client_id:
            problems.append("AZURE_CLIENT_ID is not set")
        if info["base_url"] is None:
            problems.append("tenant id / environment do not form a valid API URL")

        for problem in problems:
            print(f"❌ {problem}")
        if not problems:
            print("✅ Configuration looks valid")
        return 1 if problems else 0


async def run_command(args: argparse.Namespace) -> int:
    settings = get_settings()
    code_source = ConsoleCodeSource(open_browser=not args.no_browser)

    async with DIContainer(settings, code_source=code_source) as container:
        token_store = container.get_token_store()

        if args.command == "login":
            await token_store.authenticate()
            print("✅ Signed in")
            return 0

        if args.command == "logout":
            token_store.logout()
            print("Signed out")
            return 0

        if args.command == "status":
            token = token_store.token
            print(json.dumps({
                "authenticated": token_store.is_authenticated,
                "expires_at": token.expires_at.isoformat() if token else None,
                "has_refresh_token": bool(token and token.refresh_token),
                "client": container.get_client().get_client_info(),
            }, indent=2))
            return 0

        client = container.get_client()

        if args.command == "environments":
            _print_records(await client.list_environments())
            return 0

        if args.command == "fetch":
            query = None
            if args.filter or args.top is not None:
                query = ODataQuery(filter=args.filter, top=args.top)
            records = await ENTITY_FETCHERS[args.entity](client, query)
            _print_records(records)
            return 0

    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Business Central connector")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: info)",
    )
    parser.add_argument(
        "--validate-config", action="store_true", help="Validate configuration and exit"
    )
    parser.add_argument(
        "--no-browser", action="store_true", help="Print the sign-in URL instead of opening it"
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("login", help="Sign in interactively")
    subparsers.add_parser("logout", help="Forget stored credentials")
    subparsers.add_parser("status", help="Show sign-in state")
    subparsers.add_parser("environments", help="List environments of the tenant")

    fetch = subparsers.add_parser("fetch", help="Fetch records as JSON")
    fetch.add_argument("entity", choices=sorted(ENTITY_FETCHERS))
    fetch.add_argument("--top", type=int, default=None, help="Maximum records per page")
    fetch.add_argument("--filter", default=None, help="OData $filter expression")

    return parser


def main(argv: Optional[List[str]] = None) -> Optional[int]:
    """Main entry point with command line argument parsing"""
    load_dotenv_if_exists()

    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    try:
        get_settings()
    except ValueError as e:
        logger.error("Configuration invalid", error=str(e))
        print(f"❌ {e}")
        return 1

    if args.validate_config:
        return asyncio.run(validate_configuration())

    if not args.command:
        parser.print_help()
        return 2

    try:
        return asyncio.run(run_command(args))
    except ApiError as e:
        logger.error("Command failed", command=args.command, error_type=type(e).__name__)
        print(f"❌ {e.message}")
        return 1
    except KeyboardInterrupt:
        print("\n⚠️  Cancelled")
        return 130


if __name__ == "__main__":
    exit_code = main()
    exit(exit_code or 0)
