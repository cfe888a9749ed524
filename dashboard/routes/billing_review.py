"""Billing review routes for the portal.

Read-only view of the shared dose store. A patient is "Ready to Bill"
exactly when its record is finalized.
"""

import logging

from flask import Blueprint, current_app

from dosimetry.finalization import FinalizationStore, NotFoundError, StoreError
from dashboard.utils.api_response import api_error, api_records

logger = logging.getLogger(__name__)

billing_review_bp = Blueprint(
    "billing_review", __name__, url_prefix="/billing"
)


def _get_finalization_store():
    """Get the shared finalization store, initializing if needed."""
    if not hasattr(current_app, "finalization_store"):
        current_app.finalization_store = FinalizationStore(
            db_path=current_app.config.get("FINALIZATION_DB_PATH")
        )
    return current_app.finalization_store


# API Routes

@billing_review_bp.route("/api/patients")
def api_patients():
    """All patients with their billing status.

    Seeds the store on first view if it is empty.
    """
    try:
        store = _get_finalization_store()

        if store.seed_if_empty():
            logger.info("Seeded empty store on first portal view")

        records = sorted(store.fetch_all(), key=lambda r: r.id)
        return api_records(records)

    except StoreError as e:
        logger.error(f"API patients error: {e}")
        return api_error(e, 500)


@billing_review_bp.route("/api/patients/<patient_id>")
def api_patient(patient_id):
    """Single patient record."""
    try:
        store = _get_finalization_store()
        record = store.fetch_one(patient_id)
        return api_records(record)

    except NotFoundError as e:
        return api_error(e, 404)
    except StoreError as e:
        logger.error(f"API patient {patient_id} error: {e}")
        return api_error(e, 500)


@billing_review_bp.route("/api/reset", methods=["POST"])
def api_reset():
    """Reset the store to the seed patients."""
    try:
        store = _get_finalization_store()
        store.reset_and_seed()
        logger.warning("Store reset from billing portal")
        return api_records(message="Store reset to seed data")

    except StoreError as e:
        logger.error(f"API reset error: {e}")
        return api_error(e, 500)
