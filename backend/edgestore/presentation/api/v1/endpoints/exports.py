"""Spreadsheet and JSON downloads of the submission collections."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response, status

from edgestore.application.services import SiteDatabase
from edgestore.infrastructure.dependencies import get_database

router = APIRouter(prefix="/exports", tags=["Exports"])

_JSON_EXPORTS = ("contacts", "newsletter", "applications")


def _attachment(content: str, media_type: str, stem: str, extension: str) -> Response:
    """Wrap ``content`` as a dated download; nothing to export gives 204."""
    if not content:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    filename = f"edgemakers-{stem}-{date.today().isoformat()}.{extension}"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/contacts.csv")
async def export_contacts_csv(database: SiteDatabase = Depends(get_database)) -> Response:
    return _attachment(
        database.submissions.contacts_csv(), "text/csv; charset=utf-8", "contacts", "csv"
    )


@router.get("/newsletter-emails.csv")
async def export_newsletter_emails_csv(
    database: SiteDatabase = Depends(get_database),
) -> Response:
    return _attachment(
        database.submissions.newsletter_emails_csv(),
        "text/csv; charset=utf-8",
        "newsletter-emails",
        "csv",
    )


@router.get("/newsletter-whatsapp.csv")
async def export_newsletter_whatsapp_csv(
    database: SiteDatabase = Depends(get_database),
) -> Response:
    return _attachment(
        database.submissions.newsletter_whatsapp_csv(),
        "text/csv; charset=utf-8",
        "newsletter-whatsapp",
        "csv",
    )


@router.get("/{name}.json")
async def export_collection_json(
    name: str,
    database: SiteDatabase = Depends(get_database),
) -> Response:
    """Raw JSON array of one submission collection (always returned, even if empty)."""
    if name not in _JSON_EXPORTS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No JSON export for '{name}'",
        )
    return Response(
        content=database.submissions.export_json(name),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="edgemakers-{name}.json"'},
    )
