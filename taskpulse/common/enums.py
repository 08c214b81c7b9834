import enum


class StatusBucket(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    NEED_REVIEW = "need_review"
    LEAD_FEEDBACK = "lead_feedback"
    TO_PACK = "to_pack"
    SENT = "sent"
    CLIENT_FEEDBACK = "client_feedback"
    READY = "ready_for_client"
    PAUSED = "paused"
    DONE = "done"
    STOPPED = "stopped"
    NONE = "none"
    OTHER = "other"


class ConnectionState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class LiveEventType(str, enum.Enum):
    CONNECTED = "connected"
    MONDAY_WEBHOOK = "monday_webhook"


class MondayWebhookEvent(str, enum.Enum):
    UPDATE_COLUMN_VALUE = "update_column_value"
    CREATE_ITEM = "create_item"
    UPDATE_ITEM = "update_item"
    DELETE_ITEM = "delete_item"
