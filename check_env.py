#!/usr/bin/env python3
"""Helper script to check (and if missing, create) the .env file for the tracking API."""

from pathlib import Path
import sys

ENV_TEMPLATE = """# Supabase (required): https://supabase.com/dashboard -> Project -> Settings -> API
SALESTRACK_SUPABASE_URL=https://your-project-id.supabase.co
SALESTRACK_SUPABASE_KEY=your-service-role-key-here

# Directions service (optional - without it travelled paths are drawn as straight lines)
SALESTRACK_ROUTING_PROVIDER=mapbox
SALESTRACK_ROUTING_ACCESS_TOKEN=
# For a self-hosted OSRM server instead:
# SALESTRACK_ROUTING_PROVIDER=osrm
# SALESTRACK_ROUTING_BASE_URL=http://localhost:5000

# API
SALESTRACK_API_PREFIX=/api
# Working days run midnight to midnight in this zone
SALESTRACK_TRACKING_TIMEZONE=Asia/Jakarta
# SALESTRACK_FRONTEND_ALLOWED_ORIGINS=http://localhost:3000,http://127.0.0.1:3000
"""

SECRET_KEYS = ("SALESTRACK_SUPABASE_KEY", "SALESTRACK_ROUTING_ACCESS_TOKEN")


def _mask(value: str) -> str:
    value = value.strip()
    if len(value) > 20:
        return value[:8] + "..." + value[-4:]
    return "***" if value else ""


def _print_env_file(env_file: Path) -> None:
    print("Current contents:")
    print("-" * 60)
    for line in env_file.read_text(encoding="utf-8").splitlines():
        name, sep, value = line.partition("=")
        if sep and name.strip() in SECRET_KEYS:
            print(f"{name}={_mask(value)}")
        else:
            print(line)
    print("-" * 60)
    print()


def main() -> int:
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Tracking API Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f"❌ .env file NOT found at: {env_file}")
        env_file.write_text(ENV_TEMPLATE, encoding="utf-8")
        print(f"✅ Created template .env file at: {env_file}")
        print("⚠️  Edit it and add your Supabase credentials, then run this script again.")
        return 1

    print(f"✅ Found .env file at: {env_file}")
    print()
    _print_env_file(env_file)

    print("Testing config loading...")
    print()
    try:
        sys.path.insert(0, str(project_root))
        from src.salestrack.config import settings
        from src.salestrack.services.tracking.routing_client import RoutingConfig
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print("Make sure you're running this from the project root directory")
        return 1

    supabase_ok = bool(settings.supabase_url and settings.supabase_key)
    print(f"{'✅' if supabase_ok else '❌'} Supabase configured: {supabase_ok}")

    routing = RoutingConfig.from_settings()
    print(
        f"{'✅' if routing.is_available else '⚠️ '} Directions service ({routing.provider}) "
        f"available: {routing.is_available}"
    )
    if not routing.is_available:
        print("   Travelled paths will be drawn as straight lines between GPS pings.")
    print()

    if not supabase_ok:
        print("Troubleshooting:")
        print("1. Make sure variables start with the SALESTRACK_ prefix")
        print("2. Make sure there are no spaces around the = sign")
        print("3. Restart the API after editing .env")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
