"""
Database access layer for SparkLink Backend.

All user-initiated operations go through get_supabase_client() so that
Row Level Security applies. The service role client is reserved for
public profile reads, analytics inserts from anonymous visitors, payment
webhooks and admin review.

Table definitions and RLS policies live in supabase/migrations/.
"""
