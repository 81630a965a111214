from donor_locator.main import run

run()
