"""Prompt forwarder interface"""
from abc import ABC, abstractmethod
from dataclasses import dataclass

REASON_NOT_INSTALLED = 'app_not_installed'
REASON_PROMPT_SAVED = 'prompt_saved'


@dataclass
class SubmitResult:
    """Where the caller should navigate after forwarding a prompt"""
    redirect_url: str
    reason: str  # 'app_not_installed' | 'prompt_saved'
    message: str = ''

    @property
    def installed(self) -> bool:
        return self.reason == REASON_PROMPT_SAVED


class IPromptForwarder(ABC):
    """Hands a composed prompt to the external image-generation app"""

    @abstractmethod
    async def forward(self, prompt: str) -> SubmitResult:
        """
        Forward a prompt.

        "Not installed" is a normal result, not an error.

        Raises:
            ExternalAppError: the prompt could not be handed over
        """
        pass
