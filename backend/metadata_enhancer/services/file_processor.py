"""
File Processor Service - generates AI metadata for Drive files.

This service is responsible for:
- Per-type analysis (image, PDF, video, audio, office document, other)
- Status bookkeeping on the stored file record
- Sequential batch processing with job progress tracking
- Writing generated metadata back to Drive as custom properties

Batches run one file at a time with a fixed delay after each success, so a
folder never floods the AI provider with parallel requests.
"""
import asyncio
import base64
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .ai_service import AIService
from .google_drive_service import GoogleDriveService
from .media_service import extract_audio_from_video, extract_video_frames, render_pdf_pages
from .metadata_fields import EMERGENCY_OCR_FIELDS, OCR_FIELDS, resolve_fields
from .text_extractors import PDFExtractor, TextExtractorFactory
from ..api.exceptions import (
    AIServiceError,
    DriveFileNotFoundError,
    FileProcessingError,
    GoogleDriveError,
    NoMetadataToExportError,
    TemplateNotFoundError,
    TextExtractionError,
)
from ..core.config import BATCH_DELAY_SECONDS
from ..core.logging_config import get_logger
from ..utils.drive_properties import PROPERTY_PREFIX, build_drive_properties, properties_have_changes
from ..utils.file_types import get_document_type, is_office_mime_type

logger = get_logger(__name__)

MIN_PDF_TEXT_CHARS = 100  # Below this a PDF is treated as scanned and OCR'd
MIN_ANALYZABLE_TEXT_CHARS = 50
MIN_EMERGENCY_OCR_CHARS = 100
OCR_PAGES = 5
OCR_DPI = 150
EMERGENCY_OCR_PAGES = 3
EMERGENCY_OCR_DPI = 200
TRANSCRIPT_UNAVAILABLE = "Transcription not available"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FileProcessorService:
    """
    Service for processing Drive files with AI.

    Owns the background batch tasks it starts so they can be cancelled on
    shutdown.
    """

    def __init__(
        self,
        db_service,
        drive_service: GoogleDriveService,
        ai_service: AIService,
        batch_delay: float = BATCH_DELAY_SECONDS
    ):
        """
        Initialize file processor service.

        Args:
            db_service: Database service instance
            drive_service: GoogleDriveService instance
            ai_service: AIService instance
            batch_delay: Seconds to wait after each successfully processed file in a batch
        """
        self.db_service = db_service
        self.drive_service = drive_service
        self.ai_service = ai_service
        self.batch_delay = batch_delay
        self._batch_tasks: Dict[int, asyncio.Task] = {}
        self._pdf_extractor = PDFExtractor()

    # ========== Single file ==========

    async def process_file(self, file: Dict[str, Any], template: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Generate AI metadata for one file and store it.

        The file moves pending -> processing -> processed, or -> error with
        the failure message. Processed metadata is exported to Drive right
        away; an export failure is logged and does not fail the file.

        Args:
            file: Stored DriveFile record
            template: Optional metadata template whose fields replace the type defaults

        Returns:
            The updated file record

        Raises:
            FileProcessingError: If analysis fails
        """
        file_id = file["id"]
        await self.db_service.update_drive_file(file_id, {"status": "processing"})
        logger.info(f"Processing {file['name']} (type: {file['type']}, id: {file_id})")

        try:
            metadata = await self._analyze(file, template)
        except Exception as e:
            logger.error(f"Processing failed for {file['name']}: {e}")
            await self.db_service.update_drive_file(file_id, {
                "status": "error",
                "processing_error": str(e),
            })
            raise FileProcessingError(f"Failed to process {file['name']}: {e}") from e

        updated = await self.db_service.update_drive_file(file_id, {
            "status": "processed",
            "ai_generated_metadata": metadata,
            "processing_error": None,
        })
        logger.info(f"✅ Processed {file['name']} ({len(metadata)} fields)")

        try:
            await self.export_metadata_to_drive(updated)
            updated = await self.db_service.get_drive_file(file_id)
        except Exception as e:
            logger.warning(f"Auto-export to Drive failed for {file['name']}: {e}")

        return updated

    async def load_file_and_template(
        self,
        file_id: int,
        template_id: Optional[int] = None
    ) -> tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
        """
        Raises:
            DriveFileNotFoundError: Unknown file id
            TemplateNotFoundError: Unknown template id
        """
        file = await self.db_service.get_drive_file(file_id)
        if file is None:
            raise DriveFileNotFoundError(f"File {file_id} not found")
        return file, await self._load_template(template_id)

    async def _load_template(self, template_id: Optional[int]) -> Optional[Dict[str, Any]]:
        if template_id is None:
            return None
        template = await self.db_service.get_metadata_template(template_id)
        if template is None:
            raise TemplateNotFoundError(f"Template {template_id} not found")
        return template

    async def process_file_in_background(self, file: Dict[str, Any], template: Optional[Dict[str, Any]] = None) -> None:
        """Background-task entry point; the failure is already recorded on the file."""
        try:
            await self.process_file(file, template)
        except FileProcessingError as e:
            logger.warning(f"Background processing finished with error: {e}")

    async def _analyze(self, file: Dict[str, Any], template: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        file_type = file.get("type")
        if file_type == "image":
            return await self._process_image(file, template)
        if file_type == "pdf":
            return await self._process_pdf(file, template)
        if file_type == "video":
            return await self._process_video(file, template)
        if file_type == "audio":
            return await self._process_audio(file, template)
        if file_type == "document" or is_office_mime_type(file.get("mime_type")):
            return await self._process_document(file, template)
        return await self.ai_service.generate_default_metadata(
            file["name"], file_type or "other", file.get("mime_type")
        )

    async def _download(self, file: Dict[str, Any]) -> bytes:
        return await self.drive_service.get_file_content(file["drive_id"])

    async def _process_image(self, file: Dict[str, Any], template: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        content = await self._download(file)
        mime_type = file.get("mime_type") or ""
        image_mime = mime_type if mime_type.startswith("image/") else "image/jpeg"
        encoded = base64.b64encode(content).decode("ascii")
        return await self.ai_service.analyze_image(encoded, resolve_fields("image", template), mime_type=image_mime)

    async def _ocr_pdf(
        self,
        content: bytes,
        max_pages: int,
        dpi: int,
        fields: List[Dict[str, Any]],
        page_label: str
    ) -> str:
        """Render pages and read them back through the vision model."""
        try:
            pages = await render_pdf_pages(content, max_pages, dpi)
        except Exception as e:
            logger.warning(f"Could not render PDF pages for OCR: {e}")
            return ""

        field_name = fields[0]["name"]
        text = ""
        for index, page in enumerate(pages, start=1):
            try:
                result = await self.ai_service.analyze_image(page, fields, mime_type="image/png")
            except AIServiceError as e:
                logger.warning(f"OCR failed on page {index}: {e}")
                continue
            page_text = result.get(field_name)
            if isinstance(page_text, str) and page_text.strip():
                text += f"\n--- {page_label} {index} ---\n{page_text}\n"
        return text

    async def _process_pdf(self, file: Dict[str, Any], template: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        content = await self._download(file)
        if not content:
            raise FileProcessingError("PDF file is empty or could not be downloaded")

        fields = resolve_fields("pdf", template)
        try:
            text, page_count = await asyncio.to_thread(self._pdf_extractor.read_pages, content)
        except TextExtractionError as e:
            logger.warning(f"Text layer unreadable for {file['name']}: {e}")
            text, page_count = "", None
        extraction_method = "pypdf"

        if len(text.strip()) < MIN_PDF_TEXT_CHARS:
            logger.info(f"Little text in {file['name']} ({len(text)} chars), running OCR")
            ocr_text = await self._ocr_pdf(content, OCR_PAGES, OCR_DPI, OCR_FIELDS, "Page")
            if len(ocr_text.strip()) > len(text.strip()):
                text = ocr_text
                extraction_method = "OCR via vision model"

        context = {
            "filename": file["name"],
            "fileType": "PDF Document",
            "fileSize": file.get("size"),
            "pageCount": page_count,
            "extractionMethod": extraction_method,
        }
        if len(text.strip()) > MIN_ANALYZABLE_TEXT_CHARS:
            return await self.ai_service.analyze_document_content(text, fields, context)

        logger.warning(f"Insufficient text in {file['name']}, trying emergency OCR")
        emergency_text = await self._ocr_pdf(
            content, EMERGENCY_OCR_PAGES, EMERGENCY_OCR_DPI, EMERGENCY_OCR_FIELDS, "PAGE"
        )
        if len(emergency_text.strip()) > MIN_EMERGENCY_OCR_CHARS:
            context["extractionMethod"] = "Emergency OCR via vision model"
            return await self.ai_service.analyze_document_content(emergency_text, fields, context)

        logger.warning(f"Falling back to context-only analysis for {file['name']}")
        return await self.ai_service.analyze_document_by_context({
            "filename": file["name"],
            "fileSize": file.get("size"),
            "mimeType": file.get("mime_type"),
            "createdTime": file.get("created_time"),
            "modifiedTime": file.get("modified_time"),
            "fileType": "PDF Document",
        }, fields)

    async def _process_video(self, file: Dict[str, Any], template: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        drive_metadata = await self.drive_service.get_file_metadata(file["drive_id"])

        thumbnail_b64 = None
        thumbnail_link = file.get("thumbnail_link") or drive_metadata.get("thumbnailLink")
        if thumbnail_link:
            try:
                thumbnail = await self.drive_service.fetch_thumbnail(thumbnail_link)
                if thumbnail:
                    thumbnail_b64 = base64.b64encode(thumbnail).decode("ascii")
            except Exception as e:
                logger.warning(f"Thumbnail fetch failed for {file['name']}: {e}")

        frames: List[str] = []
        transcript = None
        try:
            content = await self._download(file)
            frames = await extract_video_frames(content, file["name"])
            audio = await extract_audio_from_video(content, file["name"])
            if audio:
                try:
                    transcript = await self.ai_service.transcribe_audio(audio, f"{Path(file['name']).stem}.mp3")
                except AIServiceError as e:
                    logger.warning(f"Transcription failed for {file['name']}: {e}")
        except GoogleDriveError as e:
            logger.warning(f"Could not download video for frame analysis: {e}")

        context = {
            **(drive_metadata.get("videoMediaMetadata") or {}),
            "fileName": file["name"],
            "fileSize": drive_metadata.get("size", file.get("size")),
            "createdTime": file.get("created_time"),
            "modifiedTime": file.get("modified_time"),
            "mimeType": file.get("mime_type"),
        }
        return await self.ai_service.analyze_video(
            context, thumbnail_b64, resolve_fields("video", template),
            frames=frames or None, transcript=transcript or None,
        )

    async def _process_audio(self, file: Dict[str, Any], template: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        content = await self._download(file)
        transcript = ""
        try:
            transcript = await self.ai_service.transcribe_audio(content, file["name"])
            logger.debug(f"Transcribed {file['name']} ({len(transcript)} chars)")
        except AIServiceError as e:
            logger.warning(f"Transcription failed for {file['name']}: {e}")

        context = {
            "fileName": file["name"],
            "fileSize": file.get("size"),
            "mimeType": file.get("mime_type"),
            "transcript": transcript or TRANSCRIPT_UNAVAILABLE,
        }
        return await self.ai_service.analyze_audio(context, resolve_fields("audio", template))

    async def _process_document(self, file: Dict[str, Any], template: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        content = await self._download(file)
        if not content:
            raise FileProcessingError("Document file is empty or could not be downloaded")
        fields = resolve_fields("document", template)
        document_type = get_document_type(file.get("mime_type"))

        text = ""
        try:
            text = await asyncio.to_thread(
                TextExtractorFactory.extract_text, content, file.get("mime_type"), file["name"]
            )
        except TextExtractionError as e:
            logger.warning(f"Text extraction failed for {file['name']}: {e}")

        if len(text.strip()) > MIN_ANALYZABLE_TEXT_CHARS:
            return await self.ai_service.analyze_document_content(text, fields, {
                "filename": file["name"],
                "fileType": document_type,
                "fileSize": file.get("size"),
            })

        return await self.ai_service.analyze_document_by_context({
            "filename": file["name"],
            "fileSize": file.get("size"),
            "mimeType": file.get("mime_type"),
            "createdTime": file.get("created_time"),
            "modifiedTime": file.get("modified_time"),
            "fileType": document_type,
        }, fields)

    # ========== Batch ==========

    async def process_batch(self, folder_id: str, template_id: Optional[int] = None, background: bool = True) -> int:
        """
        Create a processing job for every stored file in a folder.

        Args:
            folder_id: Drive folder id whose stored files are processed
            template_id: Optional metadata template id
            background: Return right after creating the job and run the loop
                        as an asyncio task; False awaits the whole batch

        Returns:
            The job id

        Raises:
            TemplateNotFoundError: Unknown template id
        """
        template = await self._load_template(template_id)
        files = await self.db_service.get_drive_files_by_folder(folder_id)

        job = await self.db_service.create_processing_job({
            "folder_id": folder_id,
            "template_id": template_id,
            "status": "running",
            "total_files": len(files),
        })
        job_id = job["id"]
        logger.info(f"Started batch job {job_id} for folder {folder_id} ({len(files)} files)")

        if not background:
            await self.run_batch(job_id, files, template)
            return job_id

        task = asyncio.create_task(self.run_batch(job_id, files, template))
        self._batch_tasks[job_id] = task
        task.add_done_callback(lambda _: self._batch_tasks.pop(job_id, None))
        return job_id

    async def run_batch(self, job_id: int, files: List[Dict[str, Any]], template: Optional[Dict[str, Any]]) -> None:
        """Process files one at a time, updating job progress after each one."""
        processed = 0
        failed = 0
        try:
            for index, file in enumerate(files):
                try:
                    await self.process_file(file, template)
                    processed += 1
                    succeeded = True
                except FileProcessingError as e:
                    failed += 1
                    succeeded = False
                    logger.warning(f"Job {job_id}: {e}")

                await self.db_service.update_processing_job(job_id, {
                    "processed_files": processed,
                    "failed_files": failed,
                })

                if succeeded and self.batch_delay > 0 and index < len(files) - 1:
                    await asyncio.sleep(self.batch_delay)

            await self.db_service.update_processing_job(job_id, {
                "status": "completed",
                "completed_at": _now(),
            })
            logger.info(f"✅ Batch job {job_id} completed ({processed} processed, {failed} failed)")
        except asyncio.CancelledError:
            await self.db_service.update_processing_job(job_id, {
                "status": "failed",
                "error_message": "Batch cancelled",
                "completed_at": _now(),
            })
            raise
        except Exception as e:
            logger.error(f"Batch job {job_id} failed: {e}", exc_info=True)
            await self.db_service.update_processing_job(job_id, {
                "status": "failed",
                "error_message": str(e),
                "completed_at": _now(),
            })

    async def shutdown(self) -> None:
        """Cancel running batch tasks and wait for them to record their state."""
        tasks = list(self._batch_tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} running batch job(s)")

    # ========== Export ==========

    async def export_metadata_to_drive(self, file: Dict[str, Any]) -> bool:
        """
        Write a file's AI metadata to Drive as custom properties.

        Returns:
            True if Drive was updated, False if it already held the same values

        Raises:
            NoMetadataToExportError: The file has no AI-generated metadata
        """
        metadata = file.get("ai_generated_metadata")
        if not metadata:
            raise NoMetadataToExportError("No AI-generated metadata to export")

        drive_metadata = await self.drive_service.get_file_metadata(file["drive_id"])
        existing = drive_metadata.get("properties") or {}
        new_properties = build_drive_properties(metadata)

        if not properties_have_changes(new_properties, existing):
            logger.info(f"Metadata for {file['name']} is already up to date, skipping export")
            return False

        body: Dict[str, Optional[str]] = dict(new_properties)
        for key in existing:
            if key.startswith(PROPERTY_PREFIX) and key not in new_properties:
                body[key] = None  # Drive deletes properties set to null

        await self.drive_service.update_file_properties(file["drive_id"], body)

        merged = {k: v for k, v in existing.items() if k not in body}
        merged.update(new_properties)
        await self.db_service.update_drive_file(file["id"], {"existing_metadata": merged})
        logger.info(f"Exported {len(new_properties)} properties for {file['name']}")
        return True

    async def _export_many(self, files: List[Dict[str, Any]]) -> Dict[str, Any]:
        summary: Dict[str, Any] = {"exported": 0, "skipped": 0, "failed": 0, "errors": []}
        for file in files:
            try:
                if await self.export_metadata_to_drive(file):
                    summary["exported"] += 1
                else:
                    summary["skipped"] += 1
            except Exception as e:
                logger.warning(f"Export failed for {file['name']}: {e}")
                summary["failed"] += 1
                summary["errors"].append({"fileId": file["id"], "error": str(e)})
        return summary

    async def export_all_metadata_to_drive(self, folder_id: str) -> Dict[str, Any]:
        """Export every processed file with metadata in a folder."""
        files = await self.db_service.get_drive_files_by_folder(folder_id)
        candidates = [
            f for f in files
            if f.get("status") == "processed" and f.get("ai_generated_metadata")
        ]
        summary = await self._export_many(candidates)
        logger.info(
            f"Folder {folder_id} export: {summary['exported']} exported, "
            f"{summary['skipped']} unchanged, {summary['failed']} failed"
        )
        return summary

    async def export_files(self, file_ids: List[int]) -> Dict[str, Any]:
        """Export an explicit list of files; unknown ids count as failed."""
        files = []
        missing = []
        for file_id in file_ids:
            file = await self.db_service.get_drive_file(file_id)
            if file is None:
                missing.append(file_id)
            else:
                files.append(file)

        summary = await self._export_many(files)
        for file_id in missing:
            summary["failed"] += 1
            summary["errors"].append({"fileId": file_id, "error": f"File {file_id} not found"})
        return summary

    async def verify_file(self, file_id: int) -> Dict[str, Any]:
        """Compare a file's stored metadata with what Drive currently holds."""
        file = await self.db_service.get_drive_file(file_id)
        if file is None:
            raise DriveFileNotFoundError(f"File {file_id} not found")

        drive_metadata = await self.drive_service.get_file_metadata(file["drive_id"])
        properties = drive_metadata.get("properties") or {}
        return {
            "fileId": file["id"],
            "fileName": file["name"],
            "driveId": file["drive_id"],
            "localMetadata": file.get("ai_generated_metadata"),
            "driveProperties": properties,
            "hasExportedData": any(key.startswith(PROPERTY_PREFIX) for key in properties),
        }
