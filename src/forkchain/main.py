"""
Application Initialization
==========================
This module constructs the MVC (Model-View-Controller) architecture and starts
the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Configures logging.
2. Instantiates the Store, which owns the chain controller and its BranchSet.
3. Instantiates the Main Window (View) and passes the Store into it.
"""
import sys

from forkchain.app.application import create_app
from forkchain.app.state import Store
from forkchain.logging_config import setup_logging
from forkchain.view.main_window import MainWindow


def main() -> int:
    # 1. Setup Logging (level and file from FORKCHAIN_LOG_LEVEL / FORKCHAIN_LOG_FILE)
    setup_logging()

    # 2. Create the Qt Application
    app = create_app()

    # 3. Initialize the chain state
    store = Store()

    # 4. Initialize the Main Window, passing the store
    window = MainWindow(store)
    window.show()

    # 5. Start Event Loop
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
