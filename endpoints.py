import logging
from typing import List
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse
from config import INCORRECT_PASSWORD, RECENT_REPLIES_LIMIT, REPORTED, SUCCESS, THREAD_LIST_LIMIT
from database import DatabaseManager
from exceptions import Exceptions
from models import (HealthResponse, NewThreadResponse, ReplyCreate, ReplyDelete, ReplyReport,
                    ReplyResponse, ThreadCreate, ThreadDelete, ThreadReport, ThreadResponse)
from utils import timestamp

logger = logging.getLogger(__name__)


def get_db(request: Request) -> DatabaseManager:
    """Resolve the store handle attached to the application at startup"""
    return request.app.state.db

# =============================================================================
# THREAD ENDPOINTS
# =============================================================================

def create_thread_router() -> APIRouter:
    router = APIRouter(prefix="/api/threads", tags=["threads"])

    @router.post("/{board}", response_model=NewThreadResponse)
    async def create_thread(board: str, thread_data: ThreadCreate, db: DatabaseManager = Depends(get_db)):
        """Start a new thread on a board"""
        thread = await db.create_thread(board, thread_data.text, thread_data.delete_password)
        logger.info("Created %s", thread)
        return NewThreadResponse.from_thread(thread)

    @router.get("/{board}", response_model=List[ThreadResponse])
    async def get_threads(board: str, db: DatabaseManager = Depends(get_db)):
        """The 10 most recently bumped threads, each with its 3 newest replies"""
        threads = await db.get_threads_by_board(board, THREAD_LIST_LIMIT, RECENT_REPLIES_LIMIT)
        return [ThreadResponse.from_thread(thread, thread.recent_replies(RECENT_REPLIES_LIMIT)) for thread in threads]

    @router.put("/{board}", response_class=PlainTextResponse)
    async def report_thread(board: str, report_data: ThreadReport, db: DatabaseManager = Depends(get_db)):
        if not await db.report_thread(board, report_data.thread_id):
            raise Exceptions.THREAD_NOT_FOUND
        logger.info("Reported thread %s on board %s", report_data.thread_id, board)
        return REPORTED

    @router.delete("/{board}", response_class=PlainTextResponse)
    async def delete_thread(board: str, delete_data: ThreadDelete, db: DatabaseManager = Depends(get_db)):
        thread = await db.get_thread(board, delete_data.thread_id, with_replies=False)
        if not thread:
            raise Exceptions.THREAD_NOT_FOUND

        if not thread.check_password(delete_data.delete_password):
            logger.warning("Incorrect delete password for thread %s", thread.thread_id)
            return INCORRECT_PASSWORD

        await db.delete_thread(thread.thread_id)
        logger.info("Deleted thread %s on board %s", thread.thread_id, board)
        return SUCCESS

    return router

# =============================================================================
# REPLY ENDPOINTS
# =============================================================================

def create_reply_router() -> APIRouter:
    router = APIRouter(prefix="/api/replies", tags=["replies"])

    @router.post("/{board}", response_model=ReplyResponse)
    async def create_reply(board: str, reply_data: ReplyCreate, db: DatabaseManager = Depends(get_db)):
        """Append a reply to a thread and bump the thread"""
        thread = await db.get_thread(board, reply_data.thread_id, with_replies=False)
        if not thread:
            raise Exceptions.THREAD_NOT_FOUND

        reply = await db.add_reply(thread.thread_id, reply_data.text, reply_data.delete_password)
        logger.info("Added %s to thread %s", reply, thread.thread_id)
        return ReplyResponse.from_reply(reply)

    @router.get("/{board}", response_model=ThreadResponse)
    async def get_thread(board: str, thread_id: str = Query(..., min_length=1), db: DatabaseManager = Depends(get_db)):
        """A single thread with every reply"""
        thread = await db.get_thread(board, thread_id)
        if not thread:
            raise Exceptions.THREAD_NOT_FOUND
        return ThreadResponse.from_thread(thread)

    @router.put("/{board}", response_class=PlainTextResponse)
    async def report_reply(board: str, report_data: ReplyReport, db: DatabaseManager = Depends(get_db)):
        thread = await db.get_thread(board, report_data.thread_id, with_replies=False)
        if not thread:
            raise Exceptions.THREAD_NOT_FOUND

        if not await db.report_reply(thread.thread_id, report_data.reply_id):
            raise Exceptions.REPLY_NOT_FOUND
        logger.info("Reported reply %s in thread %s", report_data.reply_id, thread.thread_id)
        return REPORTED

    @router.delete("/{board}", response_class=PlainTextResponse)
    async def delete_reply(board: str, delete_data: ReplyDelete, db: DatabaseManager = Depends(get_db)):
        thread = await db.get_thread(board, delete_data.thread_id)
        if not thread:
            raise Exceptions.THREAD_NOT_FOUND

        reply = thread.find_reply(delete_data.reply_id)
        if not reply:
            raise Exceptions.REPLY_NOT_FOUND

        if not reply.check_password(delete_data.delete_password):
            logger.warning("Incorrect delete password for reply %s", reply.reply_id)
            return INCORRECT_PASSWORD

        await db.redact_reply(thread.thread_id, reply.reply_id)
        logger.info("Deleted %s in thread %s", reply, thread.thread_id)
        return SUCCESS

    return router

# =============================================================================
# UTILITY ENDPOINTS
# =============================================================================

def create_utility_router() -> APIRouter:
    router = APIRouter(tags=["utilities"])

    @router.get("/health", response_model=HealthResponse)
    async def health_check(db: DatabaseManager = Depends(get_db)):
        """Health check endpoint"""
        return HealthResponse(status="healthy", timestamp=timestamp(), threads=await db.count_threads())

    return router

# =============================================================================
# ROUTER FACTORY FUNCTIONS
# =============================================================================

def get_all_routers() -> List[APIRouter]:
    """Get all API routers"""
    return [
        create_thread_router(),
        create_reply_router(),
        create_utility_router(),
    ]
