# proofread/app/main.py
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from proofread.adapters.openai_rest import OpenAIRestAdapter
from proofread.adapters.storage_local import StorageLocal
from proofread.app.extension import ProofreadExtension
from proofread.app.settings import RuntimeSettings
from proofread.app.ui_scheduler import UiScheduler
from proofread.utils import logging as logging_utils


def main(settings: Optional[RuntimeSettings] = None) -> int:
    """Open one composer window with the proofreading actions installed."""
    level = logging_utils.configure_root()
    log = logging.getLogger(__name__)
    log.debug("Effective log level: %s", logging_utils.level_name(level))
    settings = settings or RuntimeSettings.from_env()

    # Imported late so headless tooling can import this module without a display.
    from proofread.app.views.composer_window import ComposerWindow

    storage = StorageLocal(settings.config_dir, settings.home_dir)
    executor = ThreadPoolExecutor(max_workers=settings.max_workers, thread_name_prefix="proofread")
    win = ComposerWindow(on_close=lambda: extension.detach(win))
    ui = UiScheduler(win.after, win.after_cancel)

    def client_factory(api_key: str) -> OpenAIRestAdapter:
        return OpenAIRestAdapter(
            api_key,
            base_url=settings.api_base_url,
            request_timeout_s=settings.request_timeout_s,
        )

    extension = ProofreadExtension(
        storage=storage,
        ui=ui,
        executor=executor,
        client_factory=client_factory,
        wait_delay_ms=settings.wait_delay_ms,
    )
    if extension.attach(win) is None:
        log.warning("Proofreading disabled: check %s and %s", storage.prompts_path, storage.authinfo_path)
        win.status_message_var.set("AI proofreading is disabled: no prompts or API key configured.")

    ui.start()
    extension.refresh_models()
    try:
        win.mainloop()
    finally:
        ui.stop()
        executor.shutdown(wait=False, cancel_futures=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
