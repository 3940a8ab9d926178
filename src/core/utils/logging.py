import logging
import queue
import threading
import traceback

import requests


class SlackErrorHandler(logging.Handler):
    """
    A logging handler that posts error logs to a Slack incoming webhook.
    It uses a background thread and a queue to avoid blocking the caller.
    """

    def __init__(self, webhook_url, level=logging.ERROR, max_queue=100):
        super().__init__(level)
        self.webhook_url = str(webhook_url or "").strip()
        self.queue = queue.Queue(maxsize=max_queue)

        self.worker = None
        if self.webhook_url:
            self.worker = threading.Thread(target=self._worker, daemon=True)
            self.worker.start()

    def emit(self, record):
        if not self.webhook_url:
            return
        try:
            safe_record = logging.makeLogRecord(record.__dict__.copy())
            safe_record.exc_info = None
            safe_record.exc_text = None
            safe_record.msg = str(record.getMessage())
            safe_record.args = ()
            safe_record.staff_id = getattr(record, "staff_id", "-")
            safe_record.ticket_id = getattr(record, "ticket_id", "-")
            safe_record.traceback = str(getattr(record, "traceback", "No traceback"))

            msg = self.format(safe_record)

            self.queue.put_nowait(msg)
        except queue.Full:
            pass  # drop when the webhook is slower than the error rate

    def _worker(self):
        session = requests.Session()
        while True:
            msg = self.queue.get()
            try:
                session.post(self.webhook_url, json={"text": msg[:3900]}, timeout=5)
            except requests.RequestException:
                pass
            finally:
                self.queue.task_done()


class EventContextFilter(logging.Filter):
    """
    Adds staff_id/ticket_id (from `extra=`) and traceback text to log records.
    """

    CONTEXT_FIELDS = ("staff_id", "ticket_id")

    def filter(self, record):
        for field in self.CONTEXT_FIELDS:
            if not hasattr(record, field):
                setattr(record, field, "-")

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            record.traceback = "".join(
                traceback.format_exception(exc_type, exc_value, exc_tb)
            )
        else:
            record.traceback = "No traceback"

        return True
