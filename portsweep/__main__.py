from portsweep.cli import app

app(prog_name="portsweep")
