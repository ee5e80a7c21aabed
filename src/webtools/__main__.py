from webtools.cli import app

app(prog_name="webtools")
