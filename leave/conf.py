from dataclasses import dataclass

from django.conf import settings


@dataclass(frozen=True)
class PipelineSettings:
    """Policy knobs shared by the intent parser and the webhook dispatcher"""
    min_confidence: float = 0.7
    reject_relative_dates: bool = True


def get_pipeline_settings():
    return PipelineSettings(
        min_confidence=float(getattr(settings, 'LEAVE_MIN_CONFIDENCE', 0.7)),
        reject_relative_dates=bool(getattr(settings, 'LEAVE_REJECT_RELATIVE_DATES', True)),
    )
