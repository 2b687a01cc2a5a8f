from docmirror.cli import app

app(prog_name="docmirror")
