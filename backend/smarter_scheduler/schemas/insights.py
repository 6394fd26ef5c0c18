from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from smarter_scheduler.schemas.schedule import AssignmentOut
from smarter_scheduler.services.metrics import Insights, Metrics, Recommendation, RoomUtilization


class RoomUtilizationOut(BaseModel):
    room_id: str = Field(alias="roomId")
    utilization: float

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_domain(cls, item: RoomUtilization) -> "RoomUtilizationOut":
        return cls(room_id=item.room_id, utilization=item.utilization)


class RecommendationOut(BaseModel):
    type: Literal["optimization", "workload", "efficiency", "conflict"]
    title: str
    description: str

    @classmethod
    def from_domain(cls, item: Recommendation) -> "RecommendationOut":
        return cls(type=item.type, title=item.title, description=item.description)


class MetricsOut(BaseModel):
    overall_utilization: float = Field(alias="overallUtilization")
    room_utilization: list[RoomUtilizationOut] = Field(default_factory=list, alias="roomUtilization")
    total_slots: int = Field(alias="totalSlots")
    occupied_slots: int = Field(alias="occupiedSlots")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_domain(cls, metrics: Metrics) -> "MetricsOut":
        return cls(
            overall_utilization=metrics.overall_utilization,
            room_utilization=[RoomUtilizationOut.from_domain(item) for item in metrics.room_utilization],
            total_slots=metrics.total_slots,
            occupied_slots=metrics.occupied_slots,
        )


class InsightsOut(BaseModel):
    avg_utilization: float = Field(alias="avgUtilization")
    conflicts: int
    peak_time: str = Field(alias="peakTime")
    active_faculty: int = Field(alias="activeFaculty")
    room_utilization: list[RoomUtilizationOut] = Field(default_factory=list, alias="roomUtilization")
    recommendations: list[RecommendationOut] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_domain(cls, insights: Insights) -> "InsightsOut":
        return cls(
            avg_utilization=insights.avg_utilization,
            conflicts=insights.conflicts,
            peak_time=insights.peak_time,
            active_faculty=insights.active_faculty,
            room_utilization=[RoomUtilizationOut.from_domain(item) for item in insights.room_utilization],
            recommendations=[RecommendationOut.from_domain(item) for item in insights.recommendations],
        )


class GenerateScheduleResponse(BaseModel):
    message: str
    success: bool
    schedule: dict[str, list[AssignmentOut]] = Field(default_factory=dict)
    conflicts: list[str] = Field(default_factory=list)
    metrics: MetricsOut
    insights: InsightsOut


class GridCellPayload(BaseModel):
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    subject: str | None = None
    faculty: str | None = None
    room: str | None = None
    is_break: bool = Field(default=False, alias="isBreak")

    model_config = ConfigDict(populate_by_name=True)


class MetricsRequest(BaseModel):
    schedule: dict[str, list[GridCellPayload]] = Field(default_factory=dict)


class MetricsResponse(BaseModel):
    metrics: MetricsOut
    recommendations: list[RecommendationOut] = Field(default_factory=list)
