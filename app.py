"""
NiceGUI demo for geocircle.

Renders a leaflet map with two overlapping editable circles and a plain
one. Drag a center handle to move a circle, drag one of the four radius
handles to resize it; the label at the bottom shows the debug line of the
last circle that was recomputed.
"""

import sys

from dotenv import load_dotenv
from fastapi import Request
from nicegui import ui

load_dotenv()

from geocircle import BroadcastCoordinator, BrowserQuirks, EditableCircle, configure_logging  # noqa: E402
from geocircle.host.leaflet import LeafletHost  # noqa: E402

configure_logging()

PHILADELPHIA = (39.984, -75.343)


@ui.page('/')
def main_page(request: Request):
    quirks = BrowserQuirks(
        request.headers.get('user-agent', ''),
        marker_class='leaflet-marker-icon',
        canvas_class='leaflet-container',
    )

    with ui.column().classes('w-full h-screen p-4 gap-2'):
        ui.label('geocircle').classes('text-xl font-bold')
        leaflet = ui.leaflet(center=PHILADELPHIA, zoom=11).classes('w-full h-[75vh]')
        debug = ui.label('').classes('text-xs text-gray-500 font-mono')

    host = LeafletHost(leaflet)
    # Per browser session, so drags never reach circles of other sessions
    coordinator = BroadcastCoordinator()

    def announce(circle):
        center = circle.get_center()
        ui.notify(f'Circle {circle.instance_id}: ({center.lat:.5f}, {center.lng:.5f}), '
                  f'{circle.get_radius():.0f} m')

    editable = [
        EditableCircle({'lat': 39.984, 'lng': -75.343}, 3000, quirks=quirks, coordinator=coordinator,
                       editable=True, min_radius=500, max_radius=50000, debug_el=debug),
        EditableCircle({'lat': 40.0, 'lng': -75.3}, 2500, quirks=quirks, coordinator=coordinator,
                       editable=True, fill_color='#29AB87', debug_el=debug),
    ]
    for circle in editable:
        circle.on('centerchanged', announce).on('radiuschanged', announce)
        circle.add_to(host)

    plain = EditableCircle({'lat': 39.95, 'lng': -75.4}, 1200, quirks=quirks,
                           coordinator=coordinator, fill_color='#3182BD')
    plain.on('click', lambda event: ui.notify(f'Clicked plain circle at {event.lng_lat}'))
    plain.on('contextmenu', lambda event: plain.set_radius(plain.get_radius() * 1.5))
    plain.add_to(host)


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title='geocircle',
        port=8081,
        reload=not getattr(sys, 'frozen', False),
    )
