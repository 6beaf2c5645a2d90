"""
Row-set renderers.

Each function folds a ResultSet into one materialized output in a single pass:

- `to_html_table`: bordered HTML table, header row from the column names.
- `to_map_canvas`: p5.js / mappa-mundi script drawing one marker per row.
- `to_json`: `{"columns": [...], "rows": [[...], ...]}`.

Cell contents are emitted unescaped. A fault raised by the row iterator aborts
the rendering and propagates; no partial output is returned.
"""

from __future__ import annotations

from typing import Any, Dict, List

from visit_counter.domain import cells
from visit_counter.domain.models import ResultSet

_BORDER = 'style="border: 1px solid"'

MAP_CANVAS_PREAMBLE = r"""
  <script src="https://cdnjs.cloudflare.com/ajax/libs/p5.js/0.5.16/p5.min.js" type="text/javascript"></script>
  <script src="https://unpkg.com/mappa-mundi/dist/mappa.js" type="text/javascript"></script>
    <script>
    let myMap;
    let canvas;
    const mappa = new Mappa('Leaflet');
    const options = {
      lat: 0,
      lng: 0,
      zoom: 2,
      style: "http://{s}.tile.osm.org/{z}/{x}/{y}.png"
    }

    function setup(){
      canvas = createCanvas(640,480);
      myMap = mappa.tileMap(options);
      myMap.overlay(canvas)

      fill(200, 100, 100);
      myMap.onChange(drawPoint);
    }

    function draw(){
    }

    function drawPoint(){
      clear();
      let point;"""

MAP_CANVAS_CLOSING = "}</script>"

MARKER_TEMPLATE = (
    "point = myMap.latLngToPixel({lat}, {lon});\n"
    "ellipse(point.x, point.y, 10, 10);\n"
    "text({label}, point.x, point.y);\n"
)


def to_html_table(result: ResultSet) -> str:
    parts: List[str] = [f"<table {_BORDER}>"]
    for column in result.columns:
        parts.append(f"<th {_BORDER}>{column}</th>")
    width = result.column_count
    for row in result:
        parts.append(f"<tr {_BORDER}>")
        for index in range(width):
            parts.append(f"<td>{_display_at(row, index)}</td>")
        parts.append("</tr>")
    parts.append("</table>")
    return "".join(parts)


def _display_at(row: Any, index: int) -> str:
    # Short rows render as empty text rather than failing.
    if index >= len(row):
        return ""
    return cells.to_display(row[index])


def to_map_canvas(result: ResultSet) -> str:
    """
    Render (label, latitude, longitude) rows as map markers.

    Column order and count are the caller's contract; a result of another
    shape renders as nonsense script, not an error.
    """
    parts: List[str] = [MAP_CANVAS_PREAMBLE]
    for row in result:
        parts.append(
            MARKER_TEMPLATE.format(
                lat=_display_at(row, 1),
                lon=_display_at(row, 2),
                label=_display_at(row, 0),
            )
        )
    parts.append(MAP_CANVAS_CLOSING)
    return "".join(parts)


def to_json(result: ResultSet) -> Dict[str, Any]:
    width = result.column_count
    rows = [
        [cells.to_json(row[index] if index < len(row) else cells.NULL) for index in range(width)]
        for row in result
    ]
    return {"columns": list(result.columns), "rows": rows}


__all__ = [
    "MAP_CANVAS_PREAMBLE",
    "MAP_CANVAS_CLOSING",
    "to_html_table",
    "to_map_canvas",
    "to_json",
]
