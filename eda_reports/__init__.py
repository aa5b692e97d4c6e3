"""
Exploratory data-analysis reports helper package.

This package contains reusable utilities for:
- Downloading the public datasets behind the two reports (NYPD shooting
  incidents, JHU COVID-19 US time series, USDA rural-urban codes)
- Reshaping them into tidy tables and deriving model features
- Fitting small OLS models and rendering figures plus a Markdown report

All code is written in pure Python (NumPy/Pandas/statsmodels ecosystem).

EXPLAIN: Each report is a thin entry-point script (`run_shooting_report`,
`run_covid_report`); the mechanics live in the modules so they can be tested
without network access.
"""
