import calendar
import logging
import os
import threading
from datetime import date, datetime, timedelta

from sqlalchemy import or_, update

from models import db
from models.employee import Employee, STATUS_ACTIVE

logger = logging.getLogger(__name__)

DEDUP_WINDOW = timedelta(days=7)


def add_one_month(d: date) -> date:
    """Same day next month, clamped to the last day of a shorter month."""
    year, month = (d.year + 1, 1) if d.month == 12 else (d.year, d.month + 1)
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _claim(employee_id, now):
    """
    Stamp last_contract_alert only if nobody stamped it inside the window.

    The conditional UPDATE is what makes a second, concurrent sweep a no-op
    for this employee.
    """
    cutoff = now - DEDUP_WINDOW
    result = db.session.execute(
        update(Employee)
        .where(
            Employee.id == employee_id,
            or_(Employee.last_contract_alert.is_(None), Employee.last_contract_alert < cutoff),
        )
        .values(last_contract_alert=now)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    return result.rowcount == 1


def _release(employee_id, previous):
    db.session.execute(
        update(Employee)
        .where(Employee.id == employee_id)
        .values(last_contract_alert=previous)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()


def run_contract_end_sweep(notifier, today=None, now=None):
    """
    Alert HR about every active employee whose contract ends exactly one
    month from today. Returns the number of alerts sent.
    """
    today = today or date.today()
    now = now or datetime.utcnow()
    target = add_one_month(today)
    cutoff = now - DEDUP_WINDOW

    candidates = (
        Employee.query
        .filter(
            Employee.contract_end_date == target,
            or_(Employee.status == STATUS_ACTIVE, Employee.status.is_(None)),
            or_(Employee.last_contract_alert.is_(None), Employee.last_contract_alert < cutoff),
        )
        .order_by(Employee.id.asc())
        .all()
    )

    sent = 0
    for employee in candidates:
        previous = employee.last_contract_alert
        if not _claim(employee.id, now):
            continue
        if notifier.contract_end_alert(employee):
            sent += 1
        else:
            # let the next sweep retry
            _release(employee.id, previous)

    logger.info("Contract-end sweep for %s: %d candidate(s), %d alert(s) sent",
                target.isoformat(), len(candidates), sent)
    return sent


class ContractAlertWorker:
    """Daemon thread running the sweep once per interval."""

    def __init__(self, app, interval_sec=86400):
        self.app = app
        self.interval_sec = max(60, int(interval_sec))
        self._stop = threading.Event()
        self._thread = None

    def _run(self):
        while not self._stop.is_set():
            with self.app.app_context():
                try:
                    run_contract_end_sweep(self.app.extensions["notifier"])
                except Exception:
                    db.session.rollback()
                    logger.exception("Contract-end sweep failed")
                finally:
                    db.session.remove()
            self._stop.wait(self.interval_sec)

    def start(self):
        # Avoid starting twice under the Flask reloader
        if self.app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
            return False
        if self._thread and self._thread.is_alive():
            return False
        self._thread = threading.Thread(target=self._run, daemon=True, name="ContractAlertWorker")
        self._thread.start()
        return True

    def stop(self, timeout=5):
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
