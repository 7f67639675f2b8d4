"""
Pima diabetes demonstration report.

Contains:
- dataset: load the Pima Indians diabetes data and standardize its columns
- data_cleaning: complete-case filtering and outcome recoding
- logic: logistic regression of the outcome on every measurement
- summary_table: per-outcome descriptive statistics
- formatting: the shared rounding and display rules
- reporting: narrative counts and report assembly
- visualizations / rendering: distribution figure and HTML page
"""
