"""
Pydantic schemas for API request and response validation.

One module per router. Response models are built from Supabase rows with
Model.model_validate(row); unknown columns are ignored.
"""
