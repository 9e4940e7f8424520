"""Download the blank buyer import template."""

from realty_crm.services.csv_import import template_csv


def handler(request):
    """Return the header-only CSV template as an attachment."""
    return {
        "statusCode": 200,
        "headers": {
            "Content-Type": "text/csv; charset=utf-8",
            "Content-Disposition": 'attachment; filename="buyers_import_template.csv"',
        },
        "body": template_csv(),
    }
