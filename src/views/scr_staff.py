from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Input, Label, Select

from api.models import ROLE_LABELS, STAFF_ROLES
from views.base_screen import REQUEST_ERRORS, BaseScreen


class StaffScreen(BaseScreen):
    """
    Team members and their roles. Every staff endpoint is still a placeholder,
    so each action ends in an error notification.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            with Horizontal(id="hort-add-staff"):
                yield Input(id="input-staff-email", placeholder="staff@example.com")
                yield Select(
                    [(ROLE_LABELS[r], r) for r in STAFF_ROLES if r != "super_admin"],
                    value="product_staff",
                    allow_blank=False,
                    id="select-staff-role",
                )
                yield Button("Add Staff", id="btn-add-staff", variant="primary")
            yield DataTable(id="table-staff")
            yield Label("", id="label-staff-status")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.add_columns("User", "Email", "Role")
        self.load_staff()

    @work(exclusive=True)
    async def load_staff(self) -> None:
        try:
            await self.app.state.api.staff.list()
        except REQUEST_ERRORS as e:
            self.query_one("#label-staff-status", Label).update(str(e))
            self.report_error(e, "Failed to fetch staff")

    @on(Button.Pressed, "#btn-add-staff")
    @work(exclusive=True)
    async def handle_add_staff(self) -> None:
        email = self.query_one("#input-staff-email", Input).value.strip()
        role = self.query_one("#select-staff-role", Select).value
        if not email:
            self.notify("Please enter an email address", severity="error")
            return
        try:
            await self.app.state.api.staff.add(email, role)
        except REQUEST_ERRORS as e:
            self.report_error(e, "Failed to add staff member")
            return
        self.notify("Staff member added successfully")
        self.load_staff()
