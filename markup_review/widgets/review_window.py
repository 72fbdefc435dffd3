"""
ReviewWindow - Main window for marking up one submission

Layout:
- Toolbar: shape tools, clear, save, export, finalize
- Center: letterboxed image with the markup canvas on top
- Right: description editor for the selected annotation and the
  numbered observation list
- Bottom: log output
"""

import logging
from pathlib import Path
from typing import Dict, Optional

from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QVBoxLayout, QPushButton, QFrame,
    QButtonGroup, QLabel, QPlainTextEdit, QListWidget, QSplitter, QMessageBox,
    QDockWidget
)
from PyQt6.QtCore import Qt, QThreadPool
from PyQt6.QtGui import QKeySequence

from ..config import Config
from ..core.authoring import DrawingTool
from ..services.review_service import ReviewSession
from ..utils.logging_config import LoggingConfig
from .image_viewport import ImageViewport
from .markup_canvas import MarkupCanvas

logger = logging.getLogger(__name__)


class MarkupToolbar(QWidget):
    """Single-row toolbar with exclusive tool buttons and review actions."""

    # Tool definitions: (label, DrawingTool, tooltip, shortcut)
    TOOLS = [
        ("Rectangle", DrawingTool.RECTANGLE, "Rectangle (R)", "R"),
        ("Circle", DrawingTool.CIRCLE, "Circle (C)", "C"),
        ("Arrow", DrawingTool.ARROW, "Arrow (A)", "A"),
        ("Freehand", DrawingTool.FREEHAND, "Freehand pen (P)", "P"),
    ]

    BUTTON_STYLE = """
        QPushButton { background: #2d2d2d; border: 1px solid #444; border-radius: 3px;
                      color: #e0e0e0; padding: 4px 10px; }
        QPushButton:hover { background: #3a3a3a; border-color: #555; }
        QPushButton:checked { background: #556B2F; border-color: #556B2F; color: white; }
        QPushButton:disabled { background: #252525; border-color: #333; color: #666; }
    """

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.tool_buttons: Dict[DrawingTool, QPushButton] = {}
        self._setup_ui()

    def _setup_ui(self):
        layout = QHBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(4)
        self.setStyleSheet(self.BUTTON_STYLE)

        # Tool button group (exclusive selection)
        self.tool_group = QButtonGroup(self)
        self.tool_group.setExclusive(True)

        for label, tool, tooltip, shortcut in self.TOOLS:
            btn = QPushButton(label)
            btn.setCheckable(True)
            btn.setToolTip(tooltip)
            btn.setShortcut(QKeySequence(shortcut))
            self.tool_group.addButton(btn)
            self.tool_buttons[tool] = btn
            layout.addWidget(btn)

        layout.addWidget(self._create_separator())

        self.clear_btn = QPushButton("Clear")
        self.clear_btn.setToolTip("Remove all annotations")
        layout.addWidget(self.clear_btn)

        layout.addStretch()

        self.save_btn = QPushButton("Save")
        self.save_btn.setShortcut(QKeySequence.StandardKey.Save)
        layout.addWidget(self.save_btn)

        self.export_btn = QPushButton("Export")
        self.export_btn.setToolTip("Burn annotations into a copy of the image")
        layout.addWidget(self.export_btn)

        self.finalize_btn = QPushButton("Finalize")
        self.finalize_btn.setToolTip("Lock the markup and mark the submission as reported")
        layout.addWidget(self.finalize_btn)

    def _create_separator(self) -> QFrame:
        sep = QFrame()
        sep.setFrameShape(QFrame.Shape.VLine)
        sep.setStyleSheet("background: #444;")
        sep.setFixedWidth(1)
        return sep

    def set_tool(self, tool: DrawingTool):
        btn = self.tool_buttons.get(tool)
        if btn:
            btn.setChecked(True)

    def set_editing_enabled(self, enabled: bool):
        for btn in self.tool_buttons.values():
            btn.setEnabled(enabled)
        self.clear_btn.setEnabled(enabled)
        self.save_btn.setEnabled(enabled)


class ReviewWindow(QMainWindow):
    """Main window for one ReviewSession."""

    def __init__(self, review: ReviewSession, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._review = review
        self._thread_pool = QThreadPool.globalInstance()

        self.setWindowTitle(f"{Config.APP_NAME} - {review.submission_id}")
        self.resize(Config.DEFAULT_WINDOW_WIDTH, Config.DEFAULT_WINDOW_HEIGHT)

        self._setup_ui()
        self._connect_signals()

        self._viewport.set_image_bytes(review.image_bytes)
        self._toolbar.set_tool(review.session.tool)
        self._refresh_lifecycle()
        self._refresh_observations()

    # ==================== Properties ====================

    @property
    def review(self) -> ReviewSession:
        return self._review

    @property
    def canvas(self) -> MarkupCanvas:
        return self._canvas

    # ==================== UI ====================

    def _setup_ui(self):
        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        self._toolbar = MarkupToolbar()
        layout.addWidget(self._toolbar)

        splitter = QSplitter(Qt.Orientation.Horizontal)

        self._canvas = MarkupCanvas(self._review.session)
        self._viewport = ImageViewport(self._canvas)
        splitter.addWidget(self._viewport)
        splitter.addWidget(self._create_side_panel())
        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 0)
        layout.addWidget(splitter, 1)

        self.setCentralWidget(central)

        # Log panel
        self._log_view = QPlainTextEdit()
        self._log_view.setReadOnly(True)
        self._log_view.setMaximumBlockCount(500)
        log_dock = QDockWidget("Log", self)
        log_dock.setWidget(self._log_view)
        self.addDockWidget(Qt.DockWidgetArea.BottomDockWidgetArea, log_dock)
        LoggingConfig.add_widget_handler(self._log_view)

        self._status_label = QLabel()
        self.statusBar().addPermanentWidget(self._status_label)

    def _create_side_panel(self) -> QWidget:
        panel = QWidget()
        panel.setMinimumWidth(260)
        layout = QVBoxLayout(panel)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(6)

        layout.addWidget(QLabel("Description"))
        self._description_edit = QPlainTextEdit()
        self._description_edit.setPlaceholderText("Select an annotation to describe it")
        self._description_edit.setMaximumHeight(120)
        layout.addWidget(self._description_edit)

        self._submit_btn = QPushButton("Submit description")
        layout.addWidget(self._submit_btn)

        layout.addWidget(QLabel("Observations"))
        self._observation_list = QListWidget()
        layout.addWidget(self._observation_list, 1)

        self._set_description_enabled(False)
        return panel

    def _connect_signals(self):
        self._toolbar.tool_group.buttonClicked.connect(self._on_tool_button_clicked)
        self._toolbar.clear_btn.clicked.connect(self._on_clear_clicked)
        self._toolbar.save_btn.clicked.connect(self._on_save_clicked)
        self._toolbar.export_btn.clicked.connect(self._on_export_clicked)
        self._toolbar.finalize_btn.clicked.connect(self._on_finalize_clicked)
        self._submit_btn.clicked.connect(self._on_submit_description)

        self._canvas.annotations_changed.connect(self._refresh_observations)
        self._canvas.selection_changed.connect(self._on_selection_changed)
        self._canvas.description_loaded.connect(self._description_edit.setPlainText)
        self._canvas.edit_rejected.connect(self._on_edit_rejected)

    # ==================== Handlers ====================

    def _on_tool_button_clicked(self, button: QPushButton):
        for tool, btn in self._toolbar.tool_buttons.items():
            if btn is button:
                if not self._canvas.set_tool(tool):
                    self._toolbar.set_tool(self._review.session.tool)
                return

    def _on_clear_clicked(self):
        if not self._review.session.annotations:
            return
        reply = QMessageBox.question(
            self, "Clear Annotations",
            "Remove every annotation from this image?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if reply == QMessageBox.StandardButton.Yes:
            self._canvas.clear()

    def _on_save_clicked(self):
        if self._review.save() is None:
            QMessageBox.warning(self, "Save Failed", "The annotations could not be saved.")
            return
        self.statusBar().showMessage("Annotations saved", 3000)
        self._refresh_lifecycle()

    def _on_export_clicked(self):
        self._toolbar.export_btn.setEnabled(False)
        task = self._review.start_export(self._thread_pool)
        task.signals.export_complete.connect(self._on_export_complete)
        task.signals.export_failed.connect(self._on_export_failed)
        self.statusBar().showMessage("Exporting...")

    def _on_export_complete(self, submission_id: str, data: bytes, elapsed_ms: float):
        self._toolbar.export_btn.setEnabled(True)
        extension = 'png' if Config.EXPORT_FORMAT == 'png' else 'jpg'
        path = Config.get_exports_folder() / f"{submission_id}_annotated.{extension}"
        try:
            Path(path).write_bytes(data)
        except OSError as e:
            logger.error(f"Could not write export {path}: {e}")
            QMessageBox.warning(self, "Export Failed", f"Could not write {path}:\n{e}")
            return
        self.statusBar().showMessage(f"Exported to {path} ({elapsed_ms:.0f} ms)", 5000)

    def _on_export_failed(self, submission_id: str, error_kind: str, message: str):
        self._toolbar.export_btn.setEnabled(True)
        self.statusBar().clearMessage()
        QMessageBox.warning(self, "Export Failed", f"{message}\n\n({error_kind})")

    def _on_finalize_clicked(self):
        reply = QMessageBox.question(
            self, "Finalize Review",
            "Finalizing locks the markup. Continue?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if reply != QMessageBox.StandardButton.Yes:
            return
        if not self._review.finalize():
            QMessageBox.information(
                self, "Finalize",
                "Save the annotations before finalizing. If they were saved, check the log for write errors."
            )
            return
        self._canvas.set_locked(True)
        self._refresh_lifecycle()

    def _on_submit_description(self):
        if self._canvas.submit_description(self._description_edit.toPlainText()):
            self._description_edit.clear()

    def _on_selection_changed(self, annotation_id: str):
        has_selection = bool(annotation_id)
        self._set_description_enabled(has_selection and not self._review.locked)
        if not has_selection:
            self._description_edit.clear()

    def _on_edit_rejected(self):
        self.statusBar().showMessage("Markup is locked", 3000)

    # ==================== Refresh ====================

    def _refresh_observations(self):
        self._observation_list.clear()
        self._observation_list.addItems(self._review.observations())

    def _refresh_lifecycle(self):
        locked = self._review.locked
        self._toolbar.set_editing_enabled(not locked)
        self._toolbar.finalize_btn.setEnabled(not locked)
        self._set_description_enabled(not locked and self._review.session.selected is not None)
        self._status_label.setText(f"Status: {self._review.status.value}")

    def _set_description_enabled(self, enabled: bool):
        self._description_edit.setEnabled(enabled)
        self._submit_btn.setEnabled(enabled)

    def closeEvent(self, event):
        LoggingConfig.remove_widget_handler()
        super().closeEvent(event)


__all__ = ['ReviewWindow', 'MarkupToolbar']
