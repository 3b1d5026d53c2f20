from orderdesk.cli import app

app(prog_name="orderdesk")
