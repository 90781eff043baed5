from coursecheck.cli import app

app()
