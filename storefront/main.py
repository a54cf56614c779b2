"""Entry point for the storefront order desk."""

from __future__ import annotations

from storefront.admin_app import OrderDeskApp
from storefront.logger import setup_logger
from storefront.persistence import Store


def main() -> None:
    """Run the Textual order desk."""
    setup_logger()
    app = OrderDeskApp(Store())
    try:
        app.run()
    finally:
        app.shutdown_pipeline()


if __name__ == "__main__":
    main()
