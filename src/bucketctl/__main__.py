"""Allow running as `python -m bucketctl`."""

from bucketctl.cli import main

if __name__ == "__main__":
    main()
