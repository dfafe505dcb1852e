import asyncio

import fitz
import pytest

from metadata_enhancer.api.exceptions import (
    FileProcessingError,
    NoMetadataToExportError,
    TemplateNotFoundError,
)
import metadata_enhancer.services.file_processor as file_processor_module
from metadata_enhancer.services.ai_service import AIService
from metadata_enhancer.services.drive_sync_service import DriveSyncService
from metadata_enhancer.services.file_processor import FileProcessorService
from metadata_enhancer.services.providers import MockProvider

LONG_TEXT = b"Meeting notes for the quarterly planning session. Revenue grew in every region."


def _sync(db, fake_drive, folder_id="folder-1"):
    return asyncio.run(DriveSyncService(db, fake_drive).sync_folder(folder_id))


def test_sync_creates_pending_records_once(db, fake_drive):
    fake_drive.add_file("img-1", "beach.jpg", "image/jpeg", content=b"jpeg")
    fake_drive.add_file("sub", "Archive", "application/vnd.google-apps.folder")
    fake_drive.add_file("doc-1", "notes.txt", "text/plain", content=LONG_TEXT, properties={"owner": "me"})

    first = _sync(db, fake_drive)
    second = _sync(db, fake_drive)

    assert [f["drive_id"] for f in first] == ["img-1", "doc-1"]
    assert [f["id"] for f in second] == [f["id"] for f in first]
    assert first[0]["type"] == "image"
    assert first[0]["status"] == "pending"
    assert first[1]["size"] == len(LONG_TEXT)
    assert first[1]["existing_metadata"] == {"owner": "me"}


def test_sync_keeps_processing_state(db, fake_drive, processor):
    fake_drive.add_file("img-1", "beach.jpg", "image/jpeg", content=b"jpeg")
    record = _sync(db, fake_drive)[0]
    asyncio.run(processor.process_file(record))

    resynced = _sync(db, fake_drive)[0]
    assert resynced["status"] == "processed"
    assert resynced["ai_generated_metadata"]


def test_process_image_stores_metadata_and_exports(db, fake_drive, processor):
    fake_drive.add_file("img-1", "beach.jpg", "image/jpeg", content=b"jpeg")
    record = _sync(db, fake_drive)[0]

    result = asyncio.run(processor.process_file(record))

    assert result["status"] == "processed"
    assert result["processing_error"] is None
    assert result["ai_generated_metadata"]["description"] == "Mock description"
    assert result["ai_generated_metadata"]["keywords"] == ["mock", "keywords"]

    properties = fake_drive.files["img-1"]["properties"]
    assert properties["AI_description"] == "Mock description"
    assert properties["AI_keywords"] == "mock, keywords"
    assert properties["AI_Generated_By"] == "MetadataEnhancer"
    assert result["existing_metadata"]["AI_description"] == "Mock description"


def test_process_with_template_uses_template_fields(db, fake_drive, processor):
    fake_drive.add_file("img-1", "beach.jpg", "image/jpeg", content=b"jpeg")
    record = _sync(db, fake_drive)[0]
    template = asyncio.run(db.create_metadata_template({
        "name": "Photos",
        "fields": [
            {"name": "season", "description": "Season shown", "type": "select", "options": ["summer", "winter"]},
            {"name": "subjects", "description": "Main subjects", "type": "tags"},
        ],
    }))

    result = asyncio.run(processor.process_file(record, template))

    assert result["ai_generated_metadata"] == {"season": "summer", "subjects": ["mock", "subjects"]}


def test_process_text_document(db, fake_drive, processor):
    fake_drive.add_file("doc-1", "notes.txt", "text/plain", content=LONG_TEXT)
    record = _sync(db, fake_drive)[0]

    result = asyncio.run(processor.process_file(record))

    assert result["status"] == "processed"
    assert result["ai_generated_metadata"]["title"] == "Mock title"
    assert result["ai_generated_metadata"]["key_points"] == ["mock", "key points"]


def test_process_audio_uses_audio_fields(db, fake_drive, processor):
    fake_drive.add_file("aud-1", "interview.mp3", "audio/mpeg", content=b"mp3")
    record = _sync(db, fake_drive)[0]

    result = asyncio.run(processor.process_file(record))

    assert result["ai_generated_metadata"]["speakers"] == ["mock", "speakers"]


def test_process_other_file_uses_default_metadata(db, fake_drive, processor):
    fake_drive.add_file("zip-1", "archive.zip", "application/zip", content=b"PK")
    record = _sync(db, fake_drive)[0]

    result = asyncio.run(processor.process_file(record))

    assert set(result["ai_generated_metadata"]) == {"description", "keywords", "category", "mood"}


def test_empty_pdf_marks_file_as_error(db, fake_drive, processor):
    fake_drive.add_file("pdf-1", "scan.pdf", "application/pdf", content=b"")
    record = _sync(db, fake_drive)[0]

    with pytest.raises(FileProcessingError):
        asyncio.run(processor.process_file(record))

    stored = asyncio.run(db.get_drive_file(record["id"]))
    assert stored["status"] == "error"
    assert "empty" in stored["processing_error"]
    assert stored["ai_generated_metadata"] is None


def test_empty_document_marks_file_as_error(db, fake_drive, processor):
    fake_drive.add_file("doc-1", "notes.txt", "text/plain", content=b"")
    record = _sync(db, fake_drive)[0]

    with pytest.raises(FileProcessingError):
        asyncio.run(processor.process_file(record))

    stored = asyncio.run(db.get_drive_file(record["id"]))
    assert stored["status"] == "error"
    assert "Document file is empty" in stored["processing_error"]


def test_ai_failure_marks_file_as_error(db, fake_drive, failing_ai_service):
    processor = FileProcessorService(db, fake_drive, failing_ai_service, batch_delay=0)
    fake_drive.add_file("img-1", "beach.jpg", "image/jpeg", content=b"jpeg")
    record = _sync(db, fake_drive)[0]

    with pytest.raises(FileProcessingError):
        asyncio.run(processor.process_file(record))

    stored = asyncio.run(db.get_drive_file(record["id"]))
    assert stored["status"] == "error"
    assert "provider unavailable" in stored["processing_error"]


def test_batch_tracks_progress_and_failures(db, fake_drive, processor):
    fake_drive.add_file("img-1", "beach.jpg", "image/jpeg", content=b"jpeg")
    fake_drive.add_file("pdf-1", "scan.pdf", "application/pdf", content=b"")
    fake_drive.add_file("doc-1", "notes.txt", "text/plain", content=LONG_TEXT)
    _sync(db, fake_drive)

    job_id = asyncio.run(processor.process_batch("folder-1", background=False))
    job = asyncio.run(db.get_processing_job(job_id))

    assert job["status"] == "completed"
    assert job["total_files"] == 3
    assert job["processed_files"] == 2
    assert job["failed_files"] == 1
    assert job["completed_at"] is not None


def test_batch_with_empty_folder_completes(db, processor):
    job_id = asyncio.run(processor.process_batch("empty-folder", background=False))
    job = asyncio.run(db.get_processing_job(job_id))
    assert job["status"] == "completed"
    assert job["total_files"] == 0


def test_batch_with_unknown_template_is_rejected(db, processor):
    with pytest.raises(TemplateNotFoundError):
        asyncio.run(processor.process_batch("folder-1", template_id=99))
    assert asyncio.run(db.get_all_processing_jobs()) == []


def test_background_batch_runs_to_completion(db, fake_drive, processor):
    fake_drive.add_file("img-1", "beach.jpg", "image/jpeg", content=b"jpeg")
    _sync(db, fake_drive)

    async def run():
        job_id = await processor.process_batch("folder-1")
        while processor._batch_tasks:
            await asyncio.sleep(0.01)
        return await db.get_processing_job(job_id)

    job = asyncio.run(run())
    assert job["status"] == "completed"
    assert job["processed_files"] == 1


def test_export_skips_unchanged_and_removes_stale_keys(db, fake_drive, processor):
    fake_drive.add_file("img-1", "beach.jpg", "image/jpeg", content=b"jpeg")
    record = _sync(db, fake_drive)[0]
    processed = asyncio.run(processor.process_file(record))

    assert asyncio.run(processor.export_metadata_to_drive(processed)) is False

    edited = asyncio.run(db.update_drive_file(record["id"], {
        "ai_generated_metadata": {"description": "A quiet beach at dawn"},
    }))
    assert asyncio.run(processor.export_metadata_to_drive(edited)) is True

    properties = fake_drive.files["img-1"]["properties"]
    assert properties["AI_description"] == "A quiet beach at dawn"
    assert "AI_keywords" not in properties
    assert fake_drive.property_updates[-1][1]["AI_keywords"] is None


def test_export_without_metadata_raises(db, fake_drive, processor):
    fake_drive.add_file("img-1", "beach.jpg", "image/jpeg", content=b"jpeg")
    record = _sync(db, fake_drive)[0]
    with pytest.raises(NoMetadataToExportError):
        asyncio.run(processor.export_metadata_to_drive(record))


def test_folder_export_summary(db, fake_drive, processor):
    fake_drive.add_file("img-1", "beach.jpg", "image/jpeg", content=b"jpeg")
    fake_drive.add_file("img-2", "forest.jpg", "image/jpeg", content=b"jpeg")
    records = _sync(db, fake_drive)
    asyncio.run(processor.process_file(records[0]))
    asyncio.run(db.update_drive_file(records[1]["id"], {
        "status": "processed",
        "ai_generated_metadata": {"description": "Tall trees"},
    }))

    summary = asyncio.run(processor.export_all_metadata_to_drive("folder-1"))

    assert summary == {"exported": 1, "skipped": 1, "failed": 0, "errors": []}


def test_bulk_export_counts_unknown_ids_as_failed(db, fake_drive, processor):
    fake_drive.add_file("img-1", "beach.jpg", "image/jpeg", content=b"jpeg")
    record = _sync(db, fake_drive)[0]
    asyncio.run(db.update_drive_file(record["id"], {"ai_generated_metadata": {"mood": "calm"}}))

    summary = asyncio.run(processor.export_files([record["id"], 404]))

    assert summary["exported"] == 1
    assert summary["failed"] == 1
    assert summary["errors"] == [{"fileId": 404, "error": "File 404 not found"}]


def test_verify_file_reports_drive_properties(db, fake_drive, processor):
    fake_drive.add_file("img-1", "beach.jpg", "image/jpeg", content=b"jpeg")
    record = _sync(db, fake_drive)[0]

    before = asyncio.run(processor.verify_file(record["id"]))
    asyncio.run(processor.process_file(record))
    after = asyncio.run(processor.verify_file(record["id"]))

    assert before["hasExportedData"] is False
    assert after["hasExportedData"] is True
    assert after["localMetadata"]["description"] == "Mock description"
    assert after["driveProperties"]["AI_description"] == "Mock description"


REPORT_LINES = (
    "Quarterly operations report for the northern warehouse network.",
    "Inbound volume rose while average dock time fell to four hours.",
    "Staffing plans for the holiday season are attached as appendix B.",
)


class VisionProvider(MockProvider):
    """Answers OCR prompts with fixed page text and records every prompt."""

    def __init__(self, page_text="", emergency_text=""):
        self.page_text = page_text
        self.emergency_text = emergency_text
        self.calls = []

    def complete_json(self, messages, max_tokens=1000, temperature=0.7):
        self.calls.append(messages)
        system = messages[0]["content"]
        if "- extracted_text:" in system:
            return {"extracted_text": self.page_text}
        if "- full_page_text:" in system:
            return {"full_page_text": self.emergency_text}
        return super().complete_json(messages, max_tokens, temperature)


def _pdf_bytes(*lines):
    doc = fitz.open()
    page = doc.new_page()
    for index, line in enumerate(lines):
        page.insert_text((72, 72 + 20 * index), line)
    data = doc.tobytes()
    doc.close()
    return data


def _fake_renderer(monkeypatch, pages):
    calls = []

    async def render(content, max_pages, dpi):
        calls.append((max_pages, dpi))
        return list(pages)

    monkeypatch.setattr(file_processor_module, "render_pdf_pages", render)
    return calls


def _process_with(db, fake_drive, provider, drive_id):
    processor = FileProcessorService(db, fake_drive, AIService(provider), batch_delay=0)
    record = next(f for f in _sync(db, fake_drive) if f["drive_id"] == drive_id)
    return asyncio.run(processor.process_file(record))


def test_pdf_text_layer_skips_ocr(db, fake_drive, monkeypatch):
    render_calls = _fake_renderer(monkeypatch, ["p1"])
    provider = VisionProvider()
    fake_drive.add_file("pdf-1", "report.pdf", "application/pdf", content=_pdf_bytes(*REPORT_LINES))

    result = _process_with(db, fake_drive, provider, "pdf-1")

    assert result["status"] == "processed"
    assert render_calls == []
    assert len(provider.calls) == 1
    prompt = provider.calls[0][1]["content"]
    assert '"extractionMethod": "pypdf"' in prompt
    assert '"pageCount": 1' in prompt
    assert "warehouse" in prompt


def test_scanned_pdf_is_read_through_ocr(db, fake_drive, monkeypatch):
    render_calls = _fake_renderer(monkeypatch, ["p1", "p2"])
    provider = VisionProvider(page_text="Invoice 42 issued to Acme Corporation for consulting work.")
    fake_drive.add_file("pdf-1", "scan.pdf", "application/pdf", content=_pdf_bytes())

    result = _process_with(db, fake_drive, provider, "pdf-1")

    assert result["status"] == "processed"
    assert render_calls == [(5, 150)]
    ocr_calls, final_call = provider.calls[:-1], provider.calls[-1]
    assert len(ocr_calls) == 2
    assert ocr_calls[0][1]["content"][1]["image_url"]["url"] == "data:image/png;base64,p1"
    prompt = final_call[1]["content"]
    assert "--- Page 1 ---" in prompt
    assert "--- Page 2 ---" in prompt
    assert '"extractionMethod": "OCR via vision model"' in prompt


def test_pdf_falls_back_to_emergency_ocr(db, fake_drive, monkeypatch):
    render_calls = _fake_renderer(monkeypatch, ["p1", "p2"])
    provider = VisionProvider(
        emergency_text="ANNUAL SAFETY AUDIT. Section one covers fire exits, alarms and the evacuation drill schedule.",
    )
    fake_drive.add_file("pdf-1", "scan.pdf", "application/pdf", content=_pdf_bytes())

    result = _process_with(db, fake_drive, provider, "pdf-1")

    assert result["status"] == "processed"
    assert render_calls == [(5, 150), (3, 200)]
    prompt = provider.calls[-1][1]["content"]
    assert "--- PAGE 1 ---" in prompt
    assert '"extractionMethod": "Emergency OCR via vision model"' in prompt


def test_unreadable_pdf_is_analyzed_by_context(db, fake_drive, monkeypatch):
    _fake_renderer(monkeypatch, ["p1"])
    provider = VisionProvider()
    fake_drive.add_file("pdf-1", "scan.pdf", "application/pdf", content=_pdf_bytes())

    result = _process_with(db, fake_drive, provider, "pdf-1")

    assert result["status"] == "processed"
    assert result["ai_generated_metadata"]
    assert provider.calls[-1][1]["content"].startswith("Infer metadata from the file name")


def test_video_uses_frames_and_transcript(db, fake_drive, monkeypatch):
    async def frames(content, name):
        return ["f1", "f2"]

    async def audio(content, name):
        return b"mp3"

    async def broken_thumbnail(url):
        raise RuntimeError("thumbnail service down")

    monkeypatch.setattr(file_processor_module, "extract_video_frames", frames)
    monkeypatch.setattr(file_processor_module, "extract_audio_from_video", audio)
    monkeypatch.setattr(fake_drive, "fetch_thumbnail", broken_thumbnail)
    item = fake_drive.add_file("vid-1", "clip.mp4", "video/mp4", content=b"mp4")
    item["thumbnailLink"] = "https://example.com/thumb"
    item["videoMediaMetadata"] = {"durationMillis": "61000", "width": 1920, "height": 1080}
    provider = VisionProvider()

    result = _process_with(db, fake_drive, provider, "vid-1")

    assert result["status"] == "processed"
    content = provider.calls[-1][1]["content"]
    images = [part["image_url"]["url"] for part in content if part["type"] == "image_url"]
    assert images == ["data:image/jpeg;base64,f1", "data:image/jpeg;base64,f2"]
    text = content[0]["text"]
    assert "Audio transcript:\nMock transcript of clip.mp3." in text
    assert '"durationMillis": "61000"' in text


def test_video_download_failure_uses_thumbnail(db, fake_drive, monkeypatch):
    frame_calls = []

    async def frames(content, name):
        frame_calls.append(name)
        return ["f1"]

    async def thumbnail(url):
        return b"thumb"

    monkeypatch.setattr(file_processor_module, "extract_video_frames", frames)
    monkeypatch.setattr(fake_drive, "fetch_thumbnail", thumbnail)
    item = fake_drive.add_file("vid-1", "clip.mp4", "video/mp4", content=b"mp4")
    item["thumbnailLink"] = "https://example.com/thumb"
    fake_drive.contents.pop("vid-1")
    provider = VisionProvider()

    result = _process_with(db, fake_drive, provider, "vid-1")

    assert result["status"] == "processed"
    assert frame_calls == []
    content = provider.calls[-1][1]["content"]
    images = [part["image_url"]["url"] for part in content if part["type"] == "image_url"]
    assert images == ["data:image/jpeg;base64,dGh1bWI="]
    assert "Audio transcript" not in content[0]["text"]


def test_shutdown_cancels_running_batch(db, fake_drive, ai_service):
    processor = FileProcessorService(db, fake_drive, ai_service, batch_delay=10)
    fake_drive.add_file("img-1", "beach.jpg", "image/jpeg", content=b"jpeg")
    fake_drive.add_file("img-2", "dunes.jpg", "image/jpeg", content=b"jpeg")
    _sync(db, fake_drive)

    async def run():
        job_id = await processor.process_batch("folder-1")
        while (await db.get_processing_job(job_id))["processed_files"] < 1:
            await asyncio.sleep(0.01)
        await processor.shutdown()
        return await db.get_processing_job(job_id)

    job = asyncio.run(run())

    assert job["status"] == "failed"
    assert job["error_message"] == "Batch cancelled"
    assert job["processed_files"] == 1
    assert job["completed_at"] is not None


def test_batch_waits_after_each_success_except_last(db, fake_drive, ai_service, monkeypatch):
    delays = []
    real_sleep = asyncio.sleep

    async def recording_sleep(seconds, *args, **kwargs):
        delays.append(seconds)
        await real_sleep(0)

    monkeypatch.setattr(file_processor_module.asyncio, "sleep", recording_sleep)
    processor = FileProcessorService(db, fake_drive, ai_service, batch_delay=0.5)
    fake_drive.add_file("img-1", "beach.jpg", "image/jpeg", content=b"jpeg")
    fake_drive.add_file("pdf-1", "scan.pdf", "application/pdf", content=b"")
    fake_drive.add_file("img-2", "dunes.jpg", "image/jpeg", content=b"jpeg")
    fake_drive.add_file("doc-1", "notes.txt", "text/plain", content=LONG_TEXT)
    _sync(db, fake_drive)

    job_id = asyncio.run(processor.process_batch("folder-1", background=False))
    job = asyncio.run(db.get_processing_job(job_id))

    # No wait after the failed PDF or after the last file
    assert delays == [0.5, 0.5]
    assert job["processed_files"] == 3
    assert job["failed_files"] == 1
