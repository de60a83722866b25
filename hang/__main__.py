from hang.main import run

run()
