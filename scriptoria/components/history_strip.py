"""Recent archives: a row of clickable thumbnails of completed manuscripts."""

import logging
from typing import Callable, List, Optional
import customtkinter as ctk

from scriptoria.encoding import decode_preview
from scriptoria.models.manuscript import ManuscriptRecord

log = logging.getLogger(__name__)


class HistoryTile(ctk.CTkFrame):
    """A single history thumbnail."""

    def __init__(
        self,
        master,
        record: ManuscriptRecord,
        on_click: Optional[Callable[[ManuscriptRecord], None]] = None,
        thumbnail_size: tuple[int, int] = (120, 160),
        **kwargs,
    ):
        """
        Initialize a history tile.

        Args:
            master: Parent widget (HistoryStrip)
            record: The completed record this tile opens
            on_click: Callback when the tile is clicked
            thumbnail_size: (width, height) tuple for thumbnail dimensions
            **kwargs: Additional arguments for CTkFrame
        """
        super().__init__(master, border_width=2, border_color="gray60", **kwargs)
        self.record = record
        self.on_click = on_click
        self.thumbnail_width, self.thumbnail_height = thumbnail_size
        self.photo_image: Optional[ctk.CTkImage] = None

        self._setup_ui()

    def _setup_ui(self) -> None:
        self.image_label = ctk.CTkLabel(
            self,
            text="",
            width=self.thumbnail_width,
            height=self.thumbnail_height,
        )
        self.image_label.pack(padx=4, pady=(4, 2))

        self.name_label = ctk.CTkLabel(
            self,
            text=self.record.name,
            font=ctk.CTkFont(size=10, weight="bold"),
            width=self.thumbnail_width,
            anchor="center",
        )
        self.name_label.pack(fill="x", padx=4, pady=(0, 4))

        self._load_thumbnail()

        for widget in (self, self.image_label, self.name_label):
            widget.bind("<Button-1>", self._on_click)

    def _load_thumbnail(self) -> None:
        if not self.record.encoded:
            self.image_label.configure(text="No preview")
            return
        try:
            pil_image = decode_preview(
                self.record.encoded, (self.thumbnail_width, self.thumbnail_height)
            )
        except Exception as e:
            log.warning(f"Could not render thumbnail for {self.record.name}: {e}")
            self.image_label.configure(text="No preview")
            return

        self.photo_image = ctk.CTkImage(
            light_image=pil_image, size=(pil_image.width, pil_image.height)
        )
        self.image_label.configure(image=self.photo_image)

    def _on_click(self, event=None) -> None:
        if self.on_click:
            self.on_click(self.record)


class HistoryStrip(ctk.CTkFrame):
    """Shows the most recent completed manuscripts."""

    def __init__(
        self,
        master,
        on_select: Callable[[ManuscriptRecord], None],
        thumbnail_size: tuple[int, int] = (120, 160),
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self.on_select = on_select
        self.thumbnail_size = thumbnail_size
        self.tiles: List[HistoryTile] = []
        self._shown_ids: List[str] = []

        self.title_label = ctk.CTkLabel(
            self,
            text="Recent Archives",
            font=ctk.CTkFont(size=20, weight="bold"),
            anchor="w",
        )
        self.title_label.pack(fill="x", padx=10, pady=(10, 5))

        self.row = ctk.CTkFrame(self, fg_color="transparent")
        self.row.pack(fill="x", padx=10, pady=(0, 10))

    def set_records(self, records: List[ManuscriptRecord]) -> None:
        """Rebuild the tiles if the displayed records changed."""
        ids = [record.id for record in records]
        if ids == self._shown_ids:
            return
        self._shown_ids = ids

        for tile in self.tiles:
            tile.destroy()
        self.tiles = []

        for record in records:
            tile = HistoryTile(
                self.row,
                record,
                on_click=self.on_select,
                thumbnail_size=self.thumbnail_size,
            )
            tile.pack(side="left", padx=6)
            self.tiles.append(tile)
