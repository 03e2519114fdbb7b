from .message_log import ChatLogWriter, MessageLog, format_log_line

__all__ = ["ChatLogWriter", "MessageLog", "format_log_line"]
