"""
Prompt Templates

Chart explanation prompts sent to the LLM.
"""


SYSTEM_PROMPT = """You are an expert data analyst assistant. Your role is to help users understand the charts on their dashboard through clear explanations.

Key guidelines:
1. Be concise but thorough in your explanations
2. Use specific numbers and statistics when available
3. Explain statistical concepts in plain language
4. Suggest follow-up analyses when relevant
5. Format responses with markdown for readability

Base your responses on the data context provided, not assumptions."""


DATASET_CONTEXT = """This is a data analysis task. The data being analyzed is from a CSV file with {row_count} rows and {column_count} columns."""


DISTRIBUTION_PROMPT = """Analyze the distribution of "{column}". Please provide insights about:

1. The shape of the distribution (normal, skewed, etc.)
2. Key statistics (mean, median, standard deviation)
3. Any notable patterns or anomalies
4. Potential implications for the data analysis
5. Recommendations for further analysis"""


CORRELATION_PROMPT = """Analyze the correlation between "{column}" and "{secondary_column}". Please provide insights about:

1. The strength and direction of the correlation
2. The significance of the relationship
3. Any notable patterns or clusters
4. Potential causation factors to investigate
5. Recommendations for further analysis"""


OUTLIER_PROMPT = """Analyze the box plot for outliers in "{column}". Please provide insights about:

1. The overall spread of the data
2. The presence and significance of outliers
3. The symmetry of the distribution
4. Any unusual patterns
5. Practical implications of these outliers"""


CATEGORY_PROMPT = """Analyze the categorical distribution for "{column}". Please provide insights about:

1. The most prominent categories and their significance
2. The balance or imbalance between categories
3. Any unusual patterns in the category distribution
4. Potential implications for further analysis
5. How this categorical distribution might impact other variables"""


PROPORTION_PROMPT = """Analyze the proportional distribution for "{column}". Please provide insights about:

1. The relative sizes of each category segment
2. Any dominant categories and their business significance
3. The overall diversity of categories
4. How this distribution might impact decision-making
5. Recommendations for further investigation based on these proportions"""


TIME_SERIES_PROMPT = """Analyze how "{column}" changes over "{secondary_column}". Please provide insights about:

1. The overall trend direction
2. Any seasonality or repeating cycles
3. Sudden jumps, drops or gaps in the series
4. Periods that deserve a closer look
5. Recommendations for further analysis"""


CHART_PROMPTS = {
    "distribution": DISTRIBUTION_PROMPT,
    "correlation": CORRELATION_PROMPT,
    "outlier": OUTLIER_PROMPT,
    "category": CATEGORY_PROMPT,
    "proportion": PROPORTION_PROMPT,
    "time_series": TIME_SERIES_PROMPT,
}


EXPLANATION_FALLBACK = "Sorry, I encountered an error while analyzing this chart. Please try again."
