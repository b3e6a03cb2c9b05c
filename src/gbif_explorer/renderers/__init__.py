"""Pure rendering functions: occurrence records -> export strings.

All renderers follow the same pattern:
  - Input: occurrence dicts (from datasources/ or analysis/)
  - Output: str (GeoJSON, CSV or an HTML page)
  - No side effects, no I/O, no Prefect decorators

Used by flows/export.py and session.py, which decide where output goes.

Public API:
  - geojson: to_geojson (FeatureCollection of positioned records)
  - csv_export: to_csv, csv_headers, cell_text
  - species_report: build_species_report_html
  - EXPORT_FORMATS: file extension and MIME type per export format

Adding a renderer
-----------------
1. Create ``renderers/{name}.py`` with a build function::

       from gbif_explorer.renderers import render_template

       def build_mywidget_html(records: Sequence[Occurrence]) -> str:
           rows = [...]
           return render_template("mywidget.html.j2", rows=rows)

2. Create a Jinja2 template in ``templates/{name}.html.j2`` if the
   output is HTML.

3. Register the format in ``EXPORT_FORMATS`` and wire it into
   ``flows/export.py``.

4. Add tests: call your build function with sample records and assert
   on the returned text.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jinja2

# Shared Jinja2 environment for all renderers
_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
_jinja_env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=True,
)


def render_template(template_name: str, **kwargs: Any) -> str:
    """Render a Jinja2 template by name."""
    return _jinja_env.get_template(template_name).render(**kwargs)


@dataclass(frozen=True)
class ExportFormat:
    name: str
    extension: str
    media_type: str


EXPORT_FORMATS: dict[str, ExportFormat] = {
    "geojson": ExportFormat("geojson", ".geojson", "application/geo+json"),
    "csv": ExportFormat("csv", ".csv", "text/csv;charset=utf-8"),
    "report": ExportFormat("report", ".html", "text/html"),
}
