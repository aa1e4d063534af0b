#!/usr/bin/env python3
"""
Development startup script.

Runs pre-flight checks and starts the storefront API in development mode.
"""

import os
import shutil
import subprocess
import sys
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent


def check_dependencies():
    """Check if required dependencies are installed."""
    try:
        import fastapi
        import uvicorn
        import httpx
        import pydantic_settings
        import stripe
        print("✓ All core dependencies installed")
        return True
    except ImportError as e:
        print(f"✗ Missing dependency: {e.name}")
        print("\nRun: pip install -e .")
        return False


def check_env():
    """Check if .env file exists."""
    env_file = PROJECT_ROOT / "config" / ".env"
    env_example = PROJECT_ROOT / "config" / ".env.example"

    if env_file.exists():
        print("✓ Configuration file found")
        return True
    elif env_example.exists():
        print("! Configuration file not found, copying from example...")
        shutil.copy(env_example, env_file)
        print("✓ Created config/.env from example")
        print("  Please edit config/.env with your settings")
        return True
    else:
        print("✗ No configuration file found")
        return False


def check_payment_provider():
    """Warn when Stripe is selected without a key."""
    provider = os.getenv("PAYMENT_PROVIDER", "fake")
    if provider == "stripe" and not os.getenv("STRIPE_SECRET_KEY"):
        print("✗ PAYMENT_PROVIDER=stripe but STRIPE_SECRET_KEY is not set")
        return False
    print(f"✓ Payment provider: {provider}")
    return True


def start_service():
    """Start the storefront API with auto-reload."""
    print("\n🛍  Starting Storefront on http://localhost:8001 ...")
    process = subprocess.Popen(
        [
            sys.executable, "-m", "uvicorn",
            "storefront.main:app",
            "--reload",
            "--host", "0.0.0.0",
            "--port", "8001",
        ],
        cwd=PROJECT_ROOT,
    )

    print("\n" + "=" * 60)
    print("📍 Storefront API: http://localhost:8001")
    print("📍 API docs:       http://localhost:8001/docs")
    print("\nPress Ctrl+C to stop")
    print("=" * 60)

    try:
        process.wait()
    except KeyboardInterrupt:
        print("\n\nShutting down...")
        process.terminate()
        process.wait()
        print("Storefront stopped.")


def main():
    print("=" * 60)
    print("GlamorousDesi Storefront - Development Server")
    print("=" * 60)

    print("\nRunning pre-flight checks...")

    if not check_dependencies():
        sys.exit(1)

    if not check_env():
        sys.exit(1)

    if not check_payment_provider():
        sys.exit(1)

    print("\n✓ All checks passed!")

    start_service()


if __name__ == "__main__":
    main()
