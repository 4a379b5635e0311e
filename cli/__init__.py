"""MedTrans command line interface."""
