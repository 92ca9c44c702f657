from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, QRectF, Signal
from PySide6.QtGui import QPen, QBrush, QColor, QPainterPath, QPainter, QFont
from PySide6.QtWidgets import (
    QGraphicsView, QGraphicsScene, QGraphicsRectItem, QGraphicsSimpleTextItem, QGraphicsItem, QWidget
)

from forkchain.config import MAX_ZOOM, MIN_ZOOM, LayoutSettings
from forkchain.controller.layout import BlockPosition, ChainLayout
from forkchain.model.chain import Block, block_ordinal
from forkchain.model.state import BranchSet, Selection

logger = logging.getLogger(__name__)

SCENE_PADDING = 40.0
ZOOM_STEP = 1.15

CONNECTOR_COLOR = QColor("#9CA3AF")
BLOCK_BORDER = QColor("#D1D5DB")
SELECTED_FILL = QColor("#DBEAFE")
SELECTED_BORDER = QColor("#3B82F6")
TEXT_COLOR = QColor("#374151")
MUTED_TEXT = QColor("#6B7280")
APPEND_COLOR = QColor("#3B82F6")
FORK_COLOR = QColor("#22C55E")


# ------------------------------
# Scene items
# ------------------------------

class BlockItem(QGraphicsRectItem):
    """A clickable block rectangle that remembers which block it shows."""
    def __init__(self, block: Block, branch_index: int, rect: QRectF, selected: bool) -> None:
        super().__init__(rect)
        self.block = block
        self.branch_index = branch_index
        self.setPen(QPen(SELECTED_BORDER if selected else BLOCK_BORDER, 2))
        self.setBrush(QBrush(SELECTED_FILL if selected else QColor("white")))
        self.setCursor(Qt.CursorShape.PointingHandCursor)


class ActionButton(QGraphicsRectItem):
    """Append / fork affordance shown next to the selected block."""
    APPEND = "append"
    FORK = "fork"

    def __init__(self, action: str, text: str, rect: QRectF, color: QColor) -> None:
        super().__init__(rect)
        self.action = action
        self.setPen(QPen(Qt.PenStyle.NoPen))
        self.setBrush(QBrush(color))
        self.setCursor(Qt.CursorShape.PointingHandCursor)

        label = QGraphicsSimpleTextItem(text, self)
        label.setBrush(QBrush(QColor("white")))
        font = QFont()
        font.setPointSizeF(8)
        label.setFont(font)
        br = label.boundingRect()
        label.setPos(rect.center().x() - br.width() / 2, rect.center().y() - br.height() / 2)


# ------------------------------
# View
# ------------------------------

class ChainView(QGraphicsView):
    """
    Draws a ChainLayout: connectors, blocks, branch labels and the action
    buttons of the current selection. Pan by dragging, zoom with the wheel.
    """
    block_clicked = Signal(object, int)  # Block, branch index
    append_requested = Signal()
    fork_requested = Signal()
    zoom_changed = Signal(float)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setRenderHints(self.renderHints() | QPainter.Antialiasing | QPainter.TextAntialiasing)
        self.setDragMode(QGraphicsView.ScrollHandDrag)
        self.setTransformationAnchor(QGraphicsView.AnchorUnderMouse)
        self.setResizeAnchor(QGraphicsView.AnchorViewCenter)
        self.scene = QGraphicsScene(self)
        self.setScene(self.scene)
        self.setBackgroundBrush(QBrush(QColor("white")))

        self._zoom: float = 1.0

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def zoom(self) -> float:
        return self._zoom

    def render_chain(
        self,
        layout: ChainLayout,
        branch_set: BranchSet,
        selection: Optional[Selection] = None,
    ) -> None:
        """Redraw the whole diagram from a fresh layout."""
        self.scene.clear()
        settings = layout.settings

        self.scene.setSceneRect(QRectF(-SCENE_PADDING, -SCENE_PADDING, layout.width, layout.height))

        # 1. Connectors (bottom layer)
        pen = QPen(CONNECTOR_COLOR, 2)
        for connector in layout.connectors:
            path = QPainterPath()
            start, *rest = connector.path
            path.moveTo(*start)
            if connector.is_fork:
                c1, c2, end = rest
                path.cubicTo(c1[0], c1[1], c2[0], c2[1], end[0], end[1])
            else:
                path.lineTo(*rest[-1])
            item = self.scene.addPath(path, pen)
            item.setZValue(0)

        # 2. Blocks
        selected_hash = selection.block.hash if selection else None
        for block_hash, pos in layout.positions.items():
            block = self._block_at(branch_set, pos)
            if block is None or block.hash != block_hash:
                continue
            self._add_block(block, pos, branch_set, block_hash == selected_hash, settings)

        # 3. Branch labels
        label_font = QFont()
        label_font.setBold(True)
        for label in layout.labels:
            text = self.scene.addSimpleText(label.text, label_font)
            text.setBrush(QBrush(TEXT_COLOR))
            text.setPos(label.x, label.y - text.boundingRect().height())
            text.setZValue(1)

        # 4. Actions for the selected block
        if selected_hash is not None:
            anchor = layout.action_anchor(selected_hash)
            if anchor is not None:
                self._add_actions(*anchor)

        logger.debug(f"Rendered {len(layout.positions)} blocks and {len(layout.connectors)} connectors.")

    def reset_view(self) -> None:
        self.resetTransform()
        self._zoom = 1.0
        rect = self.scene.sceneRect()
        self.centerOn(rect.left() + self.viewport().width() / 2, rect.top() + self.viewport().height() / 2)
        self.zoom_changed.emit(self._zoom)

    # ------------------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------------------

    def mousePressEvent(self, event) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            item = self._hit_item(self.itemAt(event.position().toPoint()))
            if isinstance(item, ActionButton):
                if item.action == ActionButton.APPEND:
                    self.append_requested.emit()
                else:
                    self.fork_requested.emit()
                event.accept()
                return
            if isinstance(item, BlockItem):
                self.block_clicked.emit(item.block, item.branch_index)
                event.accept()
                return
        super().mousePressEvent(event)

    def wheelEvent(self, event) -> None:
        factor = ZOOM_STEP if event.angleDelta().y() > 0 else 1 / ZOOM_STEP
        new_zoom = min(MAX_ZOOM, max(MIN_ZOOM, self._zoom * factor))
        if new_zoom == self._zoom:
            return
        self.scale(new_zoom / self._zoom, new_zoom / self._zoom)
        self._zoom = new_zoom
        self.zoom_changed.emit(self._zoom)

    # ------------------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------------------

    @staticmethod
    def _block_at(branch_set: BranchSet, pos: BlockPosition) -> Optional[Block]:
        if pos.branch_index >= len(branch_set):
            return None
        blocks = branch_set[pos.branch_index].blocks
        return blocks[pos.block_index] if pos.block_index < len(blocks) else None

    @staticmethod
    def _hit_item(item: QGraphicsItem | None) -> QGraphicsItem | None:
        # Text children forward clicks to their rectangle
        while item is not None and not isinstance(item, (BlockItem, ActionButton)):
            item = item.parentItem()
        return item

    def _add_block(self, block: Block, pos: BlockPosition, branch_set: BranchSet, selected: bool, settings: LayoutSettings) -> None:
        rect = QRectF(0, 0, settings.block_width, settings.block_height)
        item = BlockItem(block, pos.branch_index, rect, selected)
        item.setPos(pos.x, pos.y)
        item.setZValue(2)
        self.scene.addItem(item)

        number = QGraphicsSimpleTextItem(f"Block {block_ordinal(block, branch_set)}", item)
        number.setBrush(QBrush(TEXT_COLOR))
        br = number.boundingRect()
        number.setPos((settings.block_width - br.width()) / 2, (settings.block_height - br.height()) / 2)

        small = QFont()
        small.setPointSizeF(7)
        protocol = QGraphicsSimpleTextItem(block.protocol_rules.name, item)
        protocol.setFont(small)
        protocol.setBrush(QBrush(MUTED_TEXT))
        br = protocol.boundingRect()
        protocol.setPos((settings.block_width - br.width()) / 2, -br.height() - 2)

    def _add_actions(self, x: float, y: float) -> None:
        background = self.scene.addRect(
            QRectF(x - 5, y - 5, 90, 64), QPen(QColor("#E5E7EB")), QBrush(QColor("white"))
        )
        background.setZValue(3)

        for i, (action, text, color) in enumerate((
            (ActionButton.APPEND, "Add Block", APPEND_COLOR),
            (ActionButton.FORK, "New Branch", FORK_COLOR),
        )):
            button = ActionButton(action, text, QRectF(0, 0, 80, 24), color)
            button.setPos(x, y + i * 30)
            button.setZValue(4)
            self.scene.addItem(button)
