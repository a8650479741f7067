"""Entry point for 'python -m tenantgate' command."""

from tenantgate.cli import main

if __name__ == "__main__":
    main()
