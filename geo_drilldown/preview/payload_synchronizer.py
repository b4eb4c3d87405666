"""
Preview payload synchronization for map charts.

This module derives the boundary and data-overlay fetch descriptors for the
current chart state and emits them only when a dependency changed, so
callers can skip redundant refetches.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..models import (
    BoundaryFetchDescriptor, ChartFilter, DataFetchDescriptor, MapChartConfig, PreviewPayload
)
from ..utils.data_utils import canonical_json, is_null_or_empty


COUNT_FUNCTION = 'count'


class SyncStatus(Enum):
    """Outcome of a payload recompute."""
    EMITTED = "emitted"
    UNCHANGED = "unchanged"
    NOT_READY = "not_ready"


@dataclass
class PreviewRequest:
    """Inputs the preview payload depends on."""

    geographic_column: Optional[str]
    boundary_id: Optional[int]
    schema_name: Optional[str]
    table_name: Optional[str]
    value_column: Optional[str]
    aggregate_function: Optional[str]
    drill_filters: Dict[str, str] = field(default_factory=dict)
    chart_filters: List[ChartFilter] = field(default_factory=list)
    pagination: Optional[Dict[str, Any]] = None
    sort: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_chart(cls, config: MapChartConfig, geographic_column: Optional[str] = None,
                   boundary_id: Optional[int] = None,
                   drill_filters: Optional[Dict[str, str]] = None,
                   default_aggregate_function: str = "sum") -> 'PreviewRequest':
        """
        Build a request from a chart configuration and the current drill state.

        Args:
            config: Persisted chart configuration
            geographic_column: Active column; defaults to the base column
            boundary_id: Active boundary; defaults to ``selected_geojson_id``
            drill_filters: Compiled drill-path filters
            default_aggregate_function: Used when the chart sets none

        Returns:
            PreviewRequest
        """
        column = geographic_column or config.geographic_column
        aggregate_function = config.aggregate_function or default_aggregate_function
        value_column = config.aggregate_column or config.value_column
        if not value_column and aggregate_function == COUNT_FUNCTION:
            value_column = column

        return cls(
            geographic_column=column,
            boundary_id=boundary_id if boundary_id is not None else config.selected_geojson_id,
            schema_name=config.schema_name,
            table_name=config.table_name,
            value_column=value_column,
            aggregate_function=aggregate_function,
            drill_filters=dict(drill_filters or {}),
            chart_filters=list(config.filters),
            pagination=config.pagination,
            sort=list(config.sort)
        )

    def missing_fields(self) -> List[str]:
        """Required fields that are not set."""
        required = {
            'geographic_column': self.geographic_column,
            'boundary_id': self.boundary_id,
            'schema_name': self.schema_name,
            'table_name': self.table_name,
            'aggregate_function': self.aggregate_function,
        }
        if self.aggregate_function != COUNT_FUNCTION:
            required['value_column'] = self.value_column
        return [name for name, value in required.items() if is_null_or_empty(value)]

    def dependency_key(self) -> str:
        """
        Canonical serialization of the dependency tuple.

        Filters are order-independent and serialized sorted; sort keeps its
        order because it is significant.
        """
        chart_filters = sorted(canonical_json(f.to_dict()) for f in self.chart_filters)
        return canonical_json([
            self.geographic_column,
            self.boundary_id,
            self.value_column,
            self.aggregate_function,
            self.schema_name,
            self.table_name,
            {'drill': self.drill_filters, 'chart': chart_filters},
            self.pagination,
            self.sort
        ])

    def to_payload(self) -> PreviewPayload:
        return PreviewPayload(
            boundary_fetch=BoundaryFetchDescriptor(boundary_id=self.boundary_id),
            data_fetch=DataFetchDescriptor(
                schema_name=self.schema_name,
                table_name=self.table_name,
                geographic_column=self.geographic_column,
                value_column=self.value_column,
                aggregate_function=self.aggregate_function,
                selected_geojson_id=self.boundary_id,
                filters=dict(self.drill_filters),
                chart_filters=list(self.chart_filters),
                pagination=self.pagination,
                sort=list(self.sort)
            )
        )


@dataclass
class SyncResult:
    """Result of a payload recompute."""

    status: SyncStatus
    payload: Optional[PreviewPayload] = None
    dependency_key: Optional[str] = None
    missing_fields: List[str] = field(default_factory=list)

    @property
    def emitted(self) -> bool:
        return self.status == SyncStatus.EMITTED


class PreviewPayloadSynchronizer:
    """
    Emits preview payloads only when their dependencies change.

    The synchronizer remembers the last emitted dependency key. It never
    raises: incomplete requests yield NOT_READY.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._last_key: Optional[str] = None

    @property
    def last_key(self) -> Optional[str]:
        return self._last_key

    def recompute(self, request: PreviewRequest) -> SyncResult:
        """
        Recompute the preview payload for a request.

        Args:
            request: Current preview inputs

        Returns:
            SyncResult with EMITTED and a payload when dependencies changed,
            UNCHANGED when they did not, NOT_READY when a field is missing
        """
        missing = request.missing_fields()
        if missing:
            self._last_key = None
            self.logger.debug(
                f"Preview not ready, missing: {', '.join(missing)}",
                extra={'event': 'payload_sync', 'status': SyncStatus.NOT_READY.value,
                       'missing_fields': missing}
            )
            return SyncResult(status=SyncStatus.NOT_READY, missing_fields=missing)

        try:
            key = request.dependency_key()
        except (TypeError, ValueError) as e:
            self._last_key = None
            self.logger.warning(f"Preview dependencies could not be serialized: {e}")
            return SyncResult(status=SyncStatus.NOT_READY, missing_fields=[])

        if key == self._last_key:
            return SyncResult(status=SyncStatus.UNCHANGED, dependency_key=key)

        self._last_key = key
        self.logger.debug(
            "Preview payload emitted",
            extra={'event': 'payload_sync', 'status': SyncStatus.EMITTED.value,
                   'dependency_key': key}
        )
        return SyncResult(status=SyncStatus.EMITTED, payload=request.to_payload(),
                          dependency_key=key)

    def reset(self):
        """Forget the last emitted dependencies."""
        self._last_key = None
