"""
Scodia Screening Flow
=====================
Explicit state machine for one screening session:

    welcome -> instructions -> upload -> analyzing -> results -> welcome

Transitions happen only through events; any other event raises
InvalidTransition.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import numpy as np

from scodia.models import AnalysisReport
from scodia.services.pipeline import ScreeningPipeline

logger = logging.getLogger("scodia.flow")


class FlowState(str, Enum):
    WELCOME = "welcome"
    INSTRUCTIONS = "instructions"
    UPLOAD = "upload"
    ANALYZING = "analyzing"
    RESULTS = "results"


class FlowEvent(str, Enum):
    START = "start"
    CONTINUE = "continue"
    ANALYZE = "analyze"
    COMPLETE = "complete"
    RESTART = "restart"


TRANSITIONS = {
    (FlowState.WELCOME, FlowEvent.START): FlowState.INSTRUCTIONS,
    (FlowState.INSTRUCTIONS, FlowEvent.CONTINUE): FlowState.UPLOAD,
    (FlowState.UPLOAD, FlowEvent.ANALYZE): FlowState.ANALYZING,
    (FlowState.ANALYZING, FlowEvent.COMPLETE): FlowState.RESULTS,
    (FlowState.RESULTS, FlowEvent.RESTART): FlowState.WELCOME,
}


class InvalidTransition(ValueError):
    """Event not allowed in the current state, or its guard failed."""


@dataclass
class CheckItem:
    title: str
    subtitle: str
    is_on: bool = False


def default_checklist() -> List[CheckItem]:
    """Photo preparation checklist shown before upload."""
    return [
        CheckItem("Even background and light", "No shadows, preferably against a wall"),
        CheckItem("Full height in frame", "Head and feet must be visible"),
        CheckItem("Arms down", "Natural pose, no leaning"),
        CheckItem("2 photos from two angles", "Side and back"),
    ]


@dataclass
class UploadState:
    """Photos picked for the current session."""
    side_image: Optional[np.ndarray] = None
    back_image: Optional[np.ndarray] = None

    @property
    def can_analyze(self) -> bool:
        return self.side_image is not None and self.back_image is not None

    def reset(self):
        self.side_image = None
        self.back_image = None


@dataclass
class ScreeningFlow:
    """One user's path through the screening screens."""
    state: FlowState = FlowState.WELCOME
    upload: UploadState = field(default_factory=UploadState)
    checklist: List[CheckItem] = field(default_factory=default_checklist)
    report: Optional[AnalysisReport] = None

    @property
    def checklist_complete(self) -> bool:
        return all(item.is_on for item in self.checklist)

    def toggle(self, index: int, is_on: bool = True):
        """Tick or untick a checklist item."""
        if self.state != FlowState.INSTRUCTIONS:
            raise InvalidTransition(f"Checklist is only editable in instructions, not {self.state.value}")
        self.checklist[index].is_on = is_on

    def set_side_image(self, image: Optional[np.ndarray]):
        self._require_upload()
        self.upload.side_image = image

    def set_back_image(self, image: Optional[np.ndarray]):
        self._require_upload()
        self.upload.back_image = image

    def _require_upload(self):
        if self.state != FlowState.UPLOAD:
            raise InvalidTransition(f"Photos can only be set in upload, not {self.state.value}")

    def send(self, event: FlowEvent, report: Optional[AnalysisReport] = None) -> FlowState:
        """
        Apply an event and return the new state.

        Raises:
            InvalidTransition: event not allowed here or guard not satisfied
        """
        target = TRANSITIONS.get((self.state, event))
        if target is None:
            raise InvalidTransition(f"Cannot {event.value} from {self.state.value}")

        if event == FlowEvent.CONTINUE and not self.checklist_complete:
            raise InvalidTransition("All checklist items must be ticked before upload")
        if event == FlowEvent.ANALYZE and not self.upload.can_analyze:
            raise InvalidTransition("Both side and back photos are required")
        if event == FlowEvent.COMPLETE:
            if report is None:
                raise InvalidTransition("Complete requires a report")
            self.report = report
        if event == FlowEvent.RESTART:
            self.upload.reset()
            self.checklist = default_checklist()
            self.report = None

        logger.debug(f"Flow {self.state.value} --{event.value}--> {target.value}")
        self.state = target
        return target

    async def run_analysis(self, pipeline: ScreeningPipeline) -> AnalysisReport:
        """Move to analyzing, run the pipeline and land on results."""
        self.send(FlowEvent.ANALYZE)
        report = await pipeline.analyze(
            side_image=self.upload.side_image,
            back_image=self.upload.back_image,
        )
        self.send(FlowEvent.COMPLETE, report=report)
        return report
