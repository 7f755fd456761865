"""Hand-off of composed prompts to the catimg app"""
import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import httpx

from spellbook.config import settings
from spellbook.exceptions import ExternalAppError
from spellbook.interfaces.prompt_forwarder import (
    IPromptForwarder,
    REASON_NOT_INSTALLED,
    REASON_PROMPT_SAVED,
    SubmitResult,
)
from spellbook.utils.ids import now_ms

logger = logging.getLogger(__name__)

CHECKER_USER_AGENT = 'Mozilla/5.0 (compatible; LazyCAT-App-Checker/1.0)'

# Page content served by the platform when catimg is not installed
NOT_INSTALLED_MARKERS = (
    '<title>无法打开</title>',
    '应用未安装, 请前往应用商店安装',
    'state_forbidden.svg',
)


class CatimgForwarder(IPromptForwarder):
    """
    Checks whether catimg is installed, then writes the prompt where catimg
    picks it up.

    Not installed -> redirect to the app store. Installed -> prompt file
    written, redirect to catimg.
    """

    def __init__(
        self,
        app_url: Optional[str] = None,
        store_url: Optional[str] = None,
        prompt_file: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.app_url = app_url or settings.CATIMG_URL
        self.store_url = store_url or settings.CATIMG_STORE_URL
        self.prompt_file = Path(prompt_file or settings.CATIMG_PROMPT_FILE)
        self.timeout = timeout or settings.CATIMG_CHECK_TIMEOUT

    async def is_installed(self) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.app_url, headers={'User-Agent': CHECKER_USER_AGENT})
        except httpx.HTTPError as e:
            logger.debug(f"catimg check failed: {e}")
            return False

        if not response.is_success:
            return False
        body = response.text
        return not any(marker in body for marker in NOT_INSTALLED_MARKERS)

    def _write_prompt(self, prompt: str) -> None:
        payload = {'prompt': prompt.strip(), 'timestamp': now_ms()}
        self.prompt_file.write_text(json.dumps(payload, ensure_ascii=False), encoding='utf-8')

    async def forward(self, prompt: str) -> SubmitResult:
        if not await self.is_installed():
            logger.info("❌ catimg is not installed, redirecting to the app store")
            return SubmitResult(
                redirect_url=self.store_url,
                reason=REASON_NOT_INSTALLED,
                message='catimg is not installed, opening the app store...'
            )

        try:
            await asyncio.to_thread(self._write_prompt, prompt)
        except OSError as e:
            logger.error(f"Failed to write catimg prompt file {self.prompt_file}: {e}")
            raise ExternalAppError(f"Could not save the prompt for catimg: {e}") from e

        logger.info("✅ Prompt saved for catimg")
        return SubmitResult(
            redirect_url=self.app_url,
            reason=REASON_PROMPT_SAVED,
            message='Prompt saved, opening catimg...'
        )
