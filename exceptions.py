from fastapi import HTTPException, status


class Exceptions:
    MISSING_FIELDS = HTTPException(status.HTTP_400_BAD_REQUEST, "Missing or invalid required fields")
    THREAD_NOT_FOUND = HTTPException(status.HTTP_404_NOT_FOUND, "Thread not found")
    REPLY_NOT_FOUND = HTTPException(status.HTTP_404_NOT_FOUND, "Reply not found")
