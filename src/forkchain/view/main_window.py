"""
Main Application Window
=======================
The primary GUI container that holds the toolbar, the chain diagram and the
branch overview.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects view events (block clicked, append, fork, clear) to
   the Store, and Store signals back to a redraw.
"""
from typing import Optional

from PySide6.QtWidgets import QMainWindow, QSplitter, QScrollArea, QLabel, QToolBar
from PySide6.QtCore import Qt
from PySide6.QtGui import QAction

from forkchain.app.state import Store
from forkchain.config import VISIBLE_APP_NAME
from forkchain.model.state import BranchSet, Selection
from forkchain.view.widgets.branch_panel import BranchPanel
from forkchain.view.widgets.chain_view import ChainView

TIP_MESSAGE = "Tip: Click a block to select it and show available actions"


class MainWindow(QMainWindow):
    def __init__(self, store: Store) -> None:
        super().__init__()
        self.store = store

        self.setWindowTitle(VISIBLE_APP_NAME)
        self.resize(1400, 800)

        # --- CENTRAL SPLITTER ---
        splitter = QSplitter(Qt.Horizontal)
        self.setCentralWidget(splitter)

        # Left: diagram
        self.chain_view = ChainView()
        splitter.addWidget(self.chain_view)

        # Right: branch cards
        self.branch_panel = BranchPanel()
        scroller = QScrollArea()
        scroller.setWidget(self.branch_panel)
        scroller.setWidgetResizable(True)
        splitter.addWidget(scroller)

        splitter.setSizes([1100, 300])

        # --- ACTIONS & TOOLBAR ---
        self._create_actions()
        self._create_toolbar()

        self.statusBar().showMessage(TIP_MESSAGE)

        # --- SIGNAL CONNECTIONS ---
        # 1. View -> Store
        self.chain_view.block_clicked.connect(self.store.select_block)
        self.chain_view.append_requested.connect(self.store.add_block)
        self.chain_view.fork_requested.connect(self.store.create_branch)
        self.chain_view.zoom_changed.connect(self.on_zoom_changed)

        # 2. Store -> View
        self.store.branches_changed.connect(self.on_branches_changed)
        self.store.selection_changed.connect(self.on_selection_changed)
        self.store.error_occurred.connect(self.on_error)

        # Initial Render
        self.on_branches_changed(self.store.branch_set)
        self.chain_view.reset_view()

    def _create_actions(self) -> None:
        self.act_clear = QAction("Clear Blockchain", self)
        self.act_clear.triggered.connect(self.store.clear)

        self.act_reset_view = QAction("Reset View", self)
        self.act_reset_view.setShortcut("Ctrl+0")
        self.act_reset_view.triggered.connect(self.chain_view.reset_view)

    def _create_toolbar(self) -> None:
        toolbar = QToolBar("Main")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)
        toolbar.addAction(self.act_clear)
        toolbar.addSeparator()
        toolbar.addAction(self.act_reset_view)

        self.lbl_zoom = QLabel()
        toolbar.addWidget(self.lbl_zoom)
        self.on_zoom_changed(self.chain_view.zoom)

    # --- SLOTS ---

    def on_branches_changed(self, branch_set: BranchSet) -> None:
        self.branch_panel.set_branches(branch_set)
        self.update_visualization()

    def on_selection_changed(self, selection: Optional[Selection]) -> None:
        self.update_visualization()

    def on_zoom_changed(self, zoom: float) -> None:
        self.lbl_zoom.setText(f"  Zoom: {round(zoom * 100)}%")

    def on_error(self, message: str) -> None:
        self.statusBar().showMessage(message, 5000)

    def update_visualization(self) -> None:
        self.chain_view.render_chain(self.store.layout(), self.store.branch_set, self.store.selection)
