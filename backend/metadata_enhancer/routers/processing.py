"""
Processing Router - trigger AI metadata generation and inspect jobs.

Single files are processed as a FastAPI background task. Batches run as
an asyncio task owned by the file processor; poll /jobs/{id} for progress.
"""
from fastapi import APIRouter, BackgroundTasks, status
from typing import List, Optional

from .dependencies import get_db_service, get_file_processor
from ..api.dto import BatchProcessRequest, ProcessFileRequest
from ..api.exceptions import JobNotFoundError
from ..models.schemas import ProcessingJob
from ..core.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/process/file/{file_id}", status_code=status.HTTP_202_ACCEPTED)
async def process_file(
    file_id: int,
    background_tasks: BackgroundTasks,
    request: Optional[ProcessFileRequest] = None
):
    processor = get_file_processor()
    template_id = request.template_id if request else None
    file, template = await processor.load_file_and_template(file_id, template_id)
    background_tasks.add_task(processor.process_file_in_background, file, template)
    logger.info(f"Queued file {file_id} for processing")
    return {"message": "Processing started", "fileId": file_id}


@router.post("/process/batch", status_code=status.HTTP_202_ACCEPTED)
async def process_batch(request: BatchProcessRequest):
    job_id = await get_file_processor().process_batch(request.folder_id, request.template_id)
    return {"jobId": job_id, "message": "Batch processing started"}


@router.get("/jobs", response_model=List[ProcessingJob])
async def list_jobs():
    return await get_db_service().get_all_processing_jobs()


@router.get("/jobs/{job_id}", response_model=ProcessingJob)
async def get_job(job_id: int):
    job = await get_db_service().get_processing_job(job_id)
    if job is None:
        raise JobNotFoundError(f"Job {job_id} not found")
    return job
