"""CSV export helpers shared by the list endpoints"""
import csv

from django.http import HttpResponse
from django.utils import timezone


def export_filename(entity, extension='csv'):
    return f"{entity}-{timezone.localdate().isoformat()}.{extension}"


def csv_response(entity, header, rows):
    """
    Build a downloadable CSV response named ``<entity>-YYYY-MM-DD.csv``.

    ``rows`` is any iterable of sequences matching ``header``; ``None`` cells
    are written as empty strings.
    """
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{export_filename(entity)}"'
    writer = csv.writer(response)
    writer.writerow(header)
    for row in rows:
        writer.writerow(['' if value is None else value for value in row])
    return response
