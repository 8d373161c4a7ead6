from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from reviewflow.paper import Paper

from .data import COLUMNS, paper_row


class PaperTableModel(QAbstractTableModel):
    """
    Qt model over an author's papers (one row per paper, COLUMNS as header).
    Rows refresh themselves: the model subscribes to each paper and emits
    dataChanged for that row whenever the paper changes.
    """

    def __init__(self, papers: Optional[Iterable[Paper]] = None, parent=None) -> None:
        super().__init__(parent)
        self._papers: List[Paper] = []
        self._listeners: Dict[int, Any] = {}
        for p in papers or []:
            if self._row_of(p) is None:
                self._watch(p)
                self._papers.append(p)

    # ── Qt API
    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return 0 if parent.isValid() else len(self._papers)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return 0 if parent.isValid() else len(COLUMNS)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole) -> Any:
        if not index.isValid() or role != Qt.DisplayRole:
            return None
        return paper_row(self._papers[index.row()])[index.column()]

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole) -> Any:
        if role != Qt.DisplayRole:
            return None
        if orientation == Qt.Horizontal:
            return COLUMNS[section]
        return section + 1

    # ── Rows
    def paper_at(self, row: int) -> Optional[Paper]:
        if 0 <= row < len(self._papers):
            return self._papers[row]
        return None

    def add_paper(self, paper: Paper) -> None:
        if self._row_of(paper) is not None:
            return
        row = len(self._papers)
        self.beginInsertRows(QModelIndex(), row, row)
        self._watch(paper)
        self._papers.append(paper)
        self.endInsertRows()

    def remove_paper(self, paper: Paper) -> bool:
        row = self._row_of(paper)
        if row is None:
            return False
        self.beginRemoveRows(QModelIndex(), row, row)
        removed = self._papers.pop(row)
        removed.unsubscribe(self._listeners.pop(id(removed)))
        self.endRemoveRows()
        return True

    def _row_of(self, paper: Paper) -> Optional[int]:
        for row, p in enumerate(self._papers):
            if p is paper:
                return row
        return None

    def _watch(self, paper: Paper) -> None:
        def _on_change(changed: Paper) -> None:
            row = self._row_of(changed)
            if row is not None:
                self.dataChanged.emit(self.index(row, 0), self.index(row, len(COLUMNS) - 1))

        self._listeners[id(paper)] = paper.subscribe(_on_change)
