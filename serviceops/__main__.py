from serviceops.cli.app import main_menu
from serviceops.db import close_connection, initialize_db
from serviceops.logging import configure_logging


def main() -> None:
    configure_logging()
    initialize_db()
    try:
        main_menu()
    finally:
        close_connection()


if __name__ == "__main__":
    main()
