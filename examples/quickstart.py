"""Attach media by selection and paste, edit a caption, delete one, then send."""

import asyncio
import logging
import tempfile
from pathlib import Path

from attachflow import (
    ClipboardItem,
    FilePreviewStore,
    MediaBlob,
    Orchestrator,
    OrchestratorConfig,
    PasteGesture,
    Preview,
    simulated_upload,
)

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
MP4 = b"\x00\x00\x00\x18ftypisom" + b"\x00" * 32


def on_upload_complete(blob: MediaBlob, preview: Preview) -> None:
    print(f"  uploaded {blob.name or 'pasted media'} -> {preview.uri[:48]}")


async def main() -> None:
    with tempfile.TemporaryDirectory() as tmpdir:
        photo = Path(tmpdir) / "photo.png"
        photo.write_bytes(PNG)

        config = OrchestratorConfig(max_files=3, upload_attempts=2)
        async with Orchestrator(
            uploader=simulated_upload(0.1, 0.3),
            on_upload_complete=on_upload_complete,
            config=config,
            preview_store=FilePreviewStore(Path(tmpdir) / "previews"),
        ) as orchestrator:
            orchestrator.subscribe(
                lambda items: print("  state:", [f"{item.kind}:{item.status}" for item in items]),
            )

            # ---- File picker ----
            print(f"select_files -> {orchestrator.select_files([photo])} accepted")

            # ---- Clipboard paste ----
            # Four entries offered, one is text, and only two slots remain.
            gesture = PasteGesture(
                items=(
                    ClipboardItem(kind="file", media_type="video/mp4", data=MP4, name="clip.mp4"),
                    ClipboardItem(kind="string", media_type="text/plain", data=b"ignored"),
                    ClipboardItem(kind="file", media_type="image/png", data=PNG),
                    ClipboardItem(kind="file", media_type="image/png", data=PNG),
                )
            )
            accepted = orchestrator.paste(gesture)
            print(f"paste -> {accepted} accepted (capacity {config.max_files}), consumed={gesture.default_prevented}")

            # ---- Edit and delete while uploads are in flight ----
            first, _, last = orchestrator.attachments
            orchestrator.toggle_caption_edit(first.id)
            orchestrator.set_caption(first.id, "holiday photo")
            orchestrator.delete(last.id)

            await orchestrator.wait_idle()

            orchestrator.set_text("What is in these?")
            submission = orchestrator.send()
            print(f"send -> {submission.text!r} with {len(submission.attachments)} attachment(s)")
            for item in submission.attachments:
                print(f"  {item.kind:<5} {item.status:<6} caption={item.caption!r}")


if __name__ == "__main__":
    asyncio.run(main())
