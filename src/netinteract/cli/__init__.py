"""netinteract command-line interface."""
