"""Allow ``python -m CrptApi``."""

from CrptApi.cli import main

if __name__ == "__main__":
    main()
