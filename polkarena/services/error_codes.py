from enum import Enum


class ErrorCode(str, Enum):
    # form validation
    REQUIRED_FIELDS_MISSING = "REQUIRED_FIELDS_MISSING"
    INVALID_EVENT_TIMES = "INVALID_EVENT_TIMES"
    START_IN_PAST = "START_IN_PAST"
    END_BEFORE_START = "END_BEFORE_START"
    INVALID_REGISTRATION_DEADLINE = "INVALID_REGISTRATION_DEADLINE"
    DEADLINE_NOT_BEFORE_START = "DEADLINE_NOT_BEFORE_START"
    DEADLINE_IN_PAST = "DEADLINE_IN_PAST"
    INVALID_PARTICIPANT_LIMIT = "INVALID_PARTICIPANT_LIMIT"
    INVALID_CUSTOM_FIELD = "INVALID_CUSTOM_FIELD"

    # submission
    SUBMISSION_IN_PROGRESS = "SUBMISSION_IN_PROGRESS"
    SHORT_CODE_TAKEN = "SHORT_CODE_TAKEN"
    SHORT_CODE_LOOKUP_FAILED = "SHORT_CODE_LOOKUP_FAILED"
    EVENT_CREATE_FAILED = "EVENT_CREATE_FAILED"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    PROFILE_LOOKUP_FAILED = "PROFILE_LOOKUP_FAILED"

    # banner upload
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    INVALID_MIME_TYPE = "INVALID_MIME_TYPE"
    EMPTY_FILE = "EMPTY_FILE"
    STORAGE_BUCKET_MISSING = "STORAGE_BUCKET_MISSING"
    STORAGE_WRITE_FAILED = "STORAGE_WRITE_FAILED"
    STORAGE_DELETE_FAILED = "STORAGE_DELETE_FAILED"
