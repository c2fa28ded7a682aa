#!/usr/bin/env python3
"""
Setup validation script for InvoiceWise.

Checks all system requirements and provides guidance for missing components.
"""

import os
import shutil
import sys
from pathlib import Path


def print_header(text: str):
    """Print a formatted header."""
    print(f"\n{'=' * 60}")
    print(f"  {text}")
    print('=' * 60)


def print_check(name: str, status: bool, message: str = ""):
    """Print a check result."""
    icon = "✅" if status else "❌"
    print(f"{icon} {name}: {message}")


def print_warning(message: str):
    """Print a warning message."""
    print(f"⚠️  {message}")


def print_info(message: str):
    """Print an info message."""
    print(f"ℹ️  {message}")


def check_python_version():
    """Check Python version."""
    print_header("Python Version")

    version = sys.version_info
    required = (3, 9)

    is_ok = version >= required
    print_check(
        "Python",
        is_ok,
        f"{version.major}.{version.minor}.{version.micro} "
        f"({'OK' if is_ok else f'requires {required[0]}.{required[1]}+'})"
    )

    return is_ok


def check_ollama(base_url: str):
    """Check Ollama installation and status."""
    print_header("Ollama (Local LLM)")

    ollama_cmd = shutil.which("ollama")
    if ollama_cmd:
        print_check("Ollama CLI", True, f"Found at {ollama_cmd}")
    else:
        print_info("Ollama CLI not found locally (a remote server still works)")

    try:
        import requests
    except ImportError:
        print_warning("requests library not installed - cannot check Ollama server")
        return False

    try:
        response = requests.get(f"{base_url}/api/tags", timeout=5)
    except requests.exceptions.RequestException:
        print_check("Ollama Server", False, f"Not reachable at {base_url}")
        print_info("Start with: ollama serve")
        return False

    if response.status_code != 200:
        print_check("Ollama Server", False, "Not responding correctly")
        return False

    models = response.json().get("models", [])
    model_names = [m.get("name", "") for m in models]
    print_check("Ollama Server", True, f"Running at {base_url}")

    if models:
        print_info(f"Available models: {', '.join(model_names[:5])}")
        if len(models) > 5:
            print_info(f"  ... and {len(models) - 5} more")
    else:
        print_warning("No models installed. Run: ollama pull llama3.2")

    return True


def check_lm_studio(base_url: str):
    """Check LM Studio server."""
    print_header("LM Studio (Local LLM)")

    try:
        import requests
    except ImportError:
        print_warning("requests library not installed - cannot check LM Studio")
        return False

    try:
        response = requests.get(f"{base_url}/models", timeout=5)
    except requests.exceptions.RequestException:
        print_check("LM Studio Server", False, "Not running")
        print_info("Download from: https://lmstudio.ai")
        print_info("Start the local server after loading a model")
        return False

    if response.status_code == 200:
        print_check("LM Studio Server", True, f"Running at {base_url}")
        return True

    print_check("LM Studio Server", False, "Not responding correctly")
    return False


def check_python_packages():
    """Check required Python packages."""
    print_header("Python Packages")

    # (import name, distribution name)
    required_packages = [
        ("streamlit", "streamlit"),
        ("flask", "Flask"),
        ("jinja2", "Jinja2"),
        ("PIL", "Pillow"),
        ("pydantic", "pydantic"),
        ("pandas", "pandas"),
        ("requests", "requests"),
        ("dotenv", "python-dotenv"),
    ]

    all_ok = True

    for import_name, display_name in required_packages:
        try:
            __import__(import_name)
            print_check(display_name, True, "Installed")
        except ImportError:
            print_check(display_name, False, "Not installed")
            all_ok = False

    if not all_ok:
        print_info("\nInstall missing packages with:")
        print_info("  pip install -e .")

    return all_ok


def check_env_file():
    """Check for .env file and the Deepseek key."""
    print_header("Environment Configuration")

    env_file = Path(".env")
    env_example = Path(".env.example")

    if env_file.exists():
        print_check(".env file", True, "Found")
    else:
        print_check(".env file", False, "Not found")
        if env_example.exists():
            print_info("Copy .env.example to .env and configure:")
            print_info("  cp .env.example .env")

    try:
        from dotenv import load_dotenv
    except ImportError:
        return False
    load_dotenv()

    if os.getenv("DEEPSEEK_API_KEY"):
        print_check("Deepseek API Key", True, "Configured")
        return True

    print_info("Deepseek API key not set (the Deepseek provider won't work)")
    return False


def main():
    """Run all checks."""
    print("\n" + "=" * 60)
    print("  InvoiceWise - Setup Validation")
    print("=" * 60)

    results = {}

    results["python"] = check_python_version()
    results["packages"] = check_python_packages()
    results["deepseek"] = check_env_file()
    results["ollama"] = check_ollama(os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").rstrip("/"))
    results["lm_studio"] = check_lm_studio(os.getenv("LM_STUDIO_BASE_URL", "http://localhost:1234/v1").rstrip("/"))

    # Summary
    print_header("Summary")

    critical_ok = results["python"] and results["packages"]
    llm_ok = results["ollama"] or results["lm_studio"] or results["deepseek"]

    if critical_ok:
        print("✅ System is ready to run the application!")
        print("\nStart with:")
        print("  streamlit run invoicewise/main.py")
        if not llm_ok:
            print_warning("No LLM provider reachable: AI suggestions will fail until one is set up")
    else:
        print("❌ Some requirements are missing:")

        if not results["python"]:
            print("  - Python 3.9+ required")
        if not results["packages"]:
            print("  - Some Python packages missing (run: pip install -e .)")

    print()
    return 0 if critical_ok else 1


if __name__ == "__main__":
    sys.exit(main())
