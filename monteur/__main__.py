"""Allow running as ``python -m monteur``."""

from monteur.cli.main import main

if __name__ == "__main__":
    main()
