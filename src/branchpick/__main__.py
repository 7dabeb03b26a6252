from branchpick.cli import app

app(prog_name="bp")
