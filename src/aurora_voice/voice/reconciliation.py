"""Reconciliation of interim and final recognition results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from aurora_voice.models import RecognitionResult, RecognitionSegment


@dataclass(slots=True, frozen=True)
class ReconciledBatch:
    interim_transcript: str
    final_transcript: str
    is_final: bool

    def segment(self) -> RecognitionSegment:
        return RecognitionSegment(interim_transcript=self.interim_transcript, is_final=self.is_final)


def reconcile_results(result_index: int, results: Sequence[RecognitionResult]) -> ReconciledBatch:
    """Fold one recognizer callback into interim and final transcripts.

    Every result from ``result_index`` onward contributes its top alternative to
    the interim transcript. Only results marked final contribute to the final
    transcript, and a single final result marks the whole batch final.
    """
    segments: list[str] = []
    final_transcript = ""
    is_final = False

    for result in results[max(0, result_index) :]:
        if not result.alternatives:
            continue
        transcript = result.alternatives[0].transcript.strip()
        segments.append(transcript)
        if result.is_final:
            final_transcript += transcript + " "
            is_final = True

    return ReconciledBatch(
        interim_transcript=" ".join(segments).strip(),
        final_transcript=final_transcript.strip(),
        is_final=is_final,
    )
