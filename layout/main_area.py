from nicegui import ui
from layout.context import PageContext


def build_main_area(ctx: PageContext) -> None:
	# This must be a flex child of a height-constrained parent.
	# flex-1 + min-h-0 is what allows the settings panels to scroll inside.
	ctx.main_area = ui.column().classes("w-full flex-1 min-h-0 min-w-0 gap-4 overflow-hidden")
