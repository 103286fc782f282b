# Centralized labels and help text used across the app.

VARIABLE_LABELS = {
    "x1": "Website Visitors",
    "x2": "Monthly Transactions",
    "x3": "Avg. Items per Transaction",
    "x4": "Customer Satisfaction (1-10)",
    "x5": "Online Ads per Month",
    "y": "Sales",
}

TEST_TOOLTIPS = {
    "Durbin-Watson test": "Autocorrelation of consecutive residuals. DW ≈ 2 means none; near 0 positive, near 4 negative.",
    "studentized Breusch-Pagan test": "Regresses squared residuals on the predictors; small p-value means the error variance is not constant.",
    "Lilliefors (Kolmogorov-Smirnov) normality test": "KS distance between standardized residuals and N(0,1), corrected for estimated mean/sd.",
    "Variance Inflation Factors": "1 / (1 - R²) of each predictor regressed on the others. Above 5 is worth a look, above 10 is severe.",
}
