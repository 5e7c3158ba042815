import sys

from ecs_service_discovery.cli.sync import main


if __name__ == "__main__":
    sys.exit(main())
