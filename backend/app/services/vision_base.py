"""
NoteMap Backend: Vision Transcriber Interface
==============================================

What:  Contract for services that turn an image of handwriting into text.
Who:   EntryService depends on this interface; GeminiTranscriber implements it.
       Tests substitute a stub implementation.
"""

from abc import ABC, abstractmethod


class VisionTranscriber(ABC):
    """
    Contract:
        - transcribe() returns the text exactly as written, without commentary
        - Provider errors surface as TranscriptionError after the
          implementation's own retries
        - A missing credential surfaces as ConfigurationError
    """

    @abstractmethod
    async def transcribe(self, image_path: str, mime_type: str) -> str:
        """
        Transcribe the handwritten text in the image at `image_path`.

        Args:
            image_path: Absolute path of a validated temp file.
            mime_type:  The image's MIME type (image/png, image/jpeg, image/webp).

        Returns:
            The transcription. Empty string when the model returns no text.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Lightweight reachability check; must not consume generation quota."""
        ...
