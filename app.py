"""
Main NiceGUI application for the graph editor.
Wires the EditorController to an SVG canvas (ui.interactive_image), a
sidebar with graph selection and explicit add-node / add-edge controls,
and a mode toolbar.

Persistence goes to the graph server when GRAPH_EDITOR_API_URL (or
"api_url" in config.json) is set, and to an in-memory store otherwise.
"""

import logging
import os
import sys
from urllib.parse import quote

from nicegui import ui, run

from dotenv import load_dotenv
load_dotenv()

from grapheditor.config import get_settings_summary
from grapheditor.storage import StorageError, create_store
from grapheditor.edit import EditActions, EditorController, GestureInterpreter, InteractionMode
from grapheditor.edit.overlay import EditOverlay
from grapheditor.edit.handlers import setup_edit_handlers

logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)

MODE_BUTTONS = [
    (InteractionMode.RENAME, 'Rename', 'edit'),
    (InteractionMode.LINK, 'Link', 'arrow_forward'),
    (InteractionMode.MOVE, 'Move', 'open_with'),
    (InteractionMode.DELETE, 'Delete', 'delete'),
]

settings = get_settings_summary()
store = create_store()


def blank_canvas_source(width: int, height: int) -> str:
    """Transparent image that gives the canvas its intrinsic size."""
    svg = f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}"></svg>'
    return 'data:image/svg+xml;charset=utf-8,' + quote(svg)


# UI Construction - encapsulated in page function to avoid global state issues
@ui.page('/')
def main_page():
    ui.dark_mode().enable()

    width, height = settings['canvas_size']
    layout_settings = settings['layout']

    state = {
        'canvas': None,
        'status_label': None,
        'tick_timer': None,
        'graphs': [],
    }

    controller = EditorController(
        actions=EditActions(store, runner=run.io_bound),
        width=width,
        height=height,
        layout_settings=layout_settings,
    )
    interpreter = GestureInterpreter(controller)
    overlay = EditOverlay(controller, on_commit=controller.commit_edit, on_cancel=controller.cancel_edit)
    overlay.setup()

    # --- Sidebar panels ---

    @ui.refreshable
    def graph_list():
        if not state['graphs']:
            ui.label('No graphs yet').classes('text-gray-400 text-sm p-2')
            return
        with ui.list().props('dense separator').classes('w-full'):
            for graph in state['graphs']:
                graph_id = graph['id']
                is_active = graph_id == controller.graph_id

                async def select(gid=graph_id):
                    await controller.load_graph(gid)
                    graph_list.refresh()

                async def remove(gid=graph_id):
                    await delete_graph(gid)

                with ui.item(on_click=select).classes('cursor-pointer'):
                    with ui.item_section():
                        ui.label(graph.get('name') or graph_id).classes('text-primary' if is_active else '')
                    with ui.item_section().props('side'):
                        ui.button(icon='close').props('flat dense round size=sm').on('click.stop', remove)

    @ui.refreshable
    def mode_toolbar():
        with ui.row().classes('gap-1'):
            for mode, label, icon in MODE_BUTTONS:
                color = 'primary' if controller.mode == mode else 'grey'
                ui.button(label, icon=icon, on_click=lambda m=mode: controller.set_mode(m)) \
                    .props(f'dense no-caps color={color}')

    @ui.refreshable
    def edge_form():
        options = {n.id: n.name for n in controller.nodes}
        with ui.row().classes('w-full items-center gap-1'):
            source_select = ui.select(options, label='From').props('dense outlined').classes('w-28')
            target_select = ui.select(options, label='To').props('dense outlined').classes('w-28')

            async def add_edge():
                if not source_select.value or not target_select.value:
                    ui.notify('Pick both endpoints', type='warning')
                    return
                await controller.request_edge(source_select.value, target_select.value)

            ui.button(icon='add', on_click=add_edge).props('flat dense round')

    @ui.refreshable
    def node_list():
        if not controller.nodes:
            ui.label('No nodes').classes('text-gray-400 text-sm p-2')
            return
        with ui.list().props('dense').classes('w-full'):
            for node in controller.nodes:
                selected = node.id == controller.selected_node_id
                with ui.item(on_click=lambda nid=node.id: controller.select_node(nid)).classes('cursor-pointer'):
                    with ui.item_section():
                        ui.label(node.name).classes('text-amber-400' if selected else '')

    def refresh_panels():
        mode_toolbar.refresh()
        edge_form.refresh()
        node_list.refresh()

    # --- Graph list actions ---

    async def refresh_graph_list():
        try:
            state['graphs'] = await run.io_bound(store.list_graphs)
        except StorageError as e:
            logger.error(f"Failed to list graphs: {e}")
            ui.notify('Failed to load graphs', type='negative')
            state['graphs'] = []
        graph_list.refresh()

    async def create_graph():
        name = (new_graph_input.value or '').strip()
        if not name:
            return
        try:
            graph = await run.io_bound(store.create_graph, name)
        except StorageError as e:
            logger.error(f"Failed to create graph: {e}")
            ui.notify('Failed to create graph', type='negative')
            return
        new_graph_input.value = ''
        await refresh_graph_list()
        await controller.load_graph(graph['id'])
        graph_list.refresh()

    async def delete_graph(graph_id: str):
        try:
            await run.io_bound(store.delete_graph, graph_id)
        except StorageError as e:
            logger.error(f"Failed to delete graph {graph_id}: {e}")
            ui.notify('Failed to delete graph', type='negative')
            return
        if controller.graph_id == graph_id:
            controller.clear_graph()
        await refresh_graph_list()

    async def add_node():
        node = await controller.add_node(new_node_input.value)
        if node is not None:
            new_node_input.value = ''

    handlers = setup_edit_handlers(state, controller, interpreter, overlay, refresh_panels)

    # --- Layout Construction ---

    with ui.row().classes('w-full no-wrap gap-4 p-4'):
        with ui.column().classes('w-72 gap-3'):
            ui.label('Graphs').classes('text-lg font-bold')
            with ui.row().classes('w-full items-center no-wrap gap-1'):
                new_graph_input = ui.input(placeholder='New graph name').props('dense outlined').classes('grow')
                new_graph_input.on('keydown.enter', create_graph)
                ui.button(icon='add', on_click=create_graph).props('flat dense round')
            graph_list()

            ui.separator()
            ui.label('Nodes').classes('text-lg font-bold')
            with ui.row().classes('w-full items-center no-wrap gap-1'):
                new_node_input = ui.input(placeholder='Node name').props('dense outlined').classes('grow')
                new_node_input.on('keydown.enter', add_node)
                ui.button(icon='add', on_click=add_node).props('flat dense round')
            edge_form()
            node_list()

        with ui.column().classes('gap-2'):
            mode_toolbar()
            with ui.element('div').classes('relative'):
                state['canvas'] = ui.interactive_image(
                    blank_canvas_source(width, height),
                    content='',
                    events=['mousedown', 'mousemove', 'mouseup'],
                    on_mouse=handlers['handle_mouse'],
                    cross=False,
                ).classes('graph-canvas').style(f'width: {width}px; height: {height}px;')
                overlay.render()
            state['status_label'] = ui.label(controller.status).classes('text-sm text-gray-400')

    state['canvas'].on('wheel.prevent', handlers['handle_wheel'], ['deltaY', 'offsetX', 'offsetY'])
    state['canvas'].on('contextmenu.prevent', lambda: None)

    ui.keyboard(on_key=handlers['handle_keyboard'])
    state['tick_timer'] = ui.timer(layout_settings['tick_interval'], handlers['handle_tick'])
    ui.context.client.on_disconnect(handlers['teardown'])

    handlers['render_canvas']()
    ui.timer(0.1, refresh_graph_list, once=True)


if __name__ in {"__main__", "__mp_main__"}:
    logger.info(f"Starting graph editor with {store.backend_type} storage")
    ui.run(
        title='Graph Editor',
        port=8080,
        reload=not getattr(sys, 'frozen', False),
    )
