"""
Branch overview panel: one card per branch with its protocol.
"""
from PySide6.QtWidgets import QWidget, QVBoxLayout, QLabel, QGroupBox, QFormLayout

from forkchain.model.state import BranchSet


class BranchPanel(QWidget):
    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._layout = QVBoxLayout(self)
        self._layout.addStretch()
        self._cards: list[QGroupBox] = []

    def set_branches(self, branch_set: BranchSet) -> None:
        for card in self._cards:
            self._layout.removeWidget(card)
            card.deleteLater()
        self._cards.clear()

        for index, branch in enumerate(branch_set):
            card = QGroupBox(branch.name)
            form = QFormLayout(card)
            rules = branch.protocol_rules
            form.addRow("Protocol:", QLabel(rules.name))
            form.addRow("Consensus:", QLabel(rules.consensus_mechanism))
            form.addRow("Validation:", QLabel(", ".join(rules.validation_rules) or "none"))

            # The fork point belongs to the parent branch
            own = len(branch) if index == 0 else max(0, len(branch) - 1)
            form.addRow("Blocks:", QLabel(str(own)))

            # Keep the stretch as the last item
            self._layout.insertWidget(self._layout.count() - 1, card)
            self._cards.append(card)
