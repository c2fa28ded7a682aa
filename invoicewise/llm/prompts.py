"""
LLM prompt templates for line item suggestions.

Contains:
- The suggestion prompt (keywords -> three description/amount pairs)
- A few-shot example of the expected JSON reply
"""

# Few-shot example of the reply shape
FEW_SHOT_EXAMPLE = '''
Example:
Keywords: logo design

Expected JSON Output:
{{
  "suggestions": [
    {{"description": "Logo design - 3 initial concepts with 2 revision rounds", "amount": 450.00}},
    {{"description": "Brand identity package (logo, color palette, typography)", "amount": 1200.00}},
    {{"description": "Logo refresh and vector redraw of existing mark", "amount": 275.00}}
  ]
}}
'''


SUGGESTION_PROMPT = '''You are an invoice assistant that suggests descriptions and amounts for invoice items based on keywords.

Based on the following keywords, suggest three different descriptions and amounts for invoice items. Return the description and amount as a JSON array.

Keywords: {keywords}

Format the amount to 2 decimal places.

IMPORTANT RULES:
1. Return exactly three suggestions, each different from the others
2. "description" is a short line item text a client would understand
3. "amount" is a plain non-negative number: no currency symbols, no quotes
4. Do not include any explanation outside the JSON

REQUIRED JSON STRUCTURE:
{{
  "suggestions": [
    {{"description": "string", "amount": number}}
  ]
}}
{few_shot}
Return ONLY the JSON object, no additional text or markdown formatting.
'''


def get_suggestion_prompt(
    keywords: str,
    include_few_shot: bool = True,
) -> str:
    """
    Generate the suggestion prompt for the given keywords.

    Args:
        keywords: Free-text keywords describing the product or service
        include_few_shot: Whether to include the few-shot example

    Returns:
        Formatted prompt string
    """
    few_shot = FEW_SHOT_EXAMPLE.format() if include_few_shot else ""
    return SUGGESTION_PROMPT.format(
        keywords=keywords,
        few_shot=few_shot,
    )
