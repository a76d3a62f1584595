"""
Core components of the demonlist.

- scoring: score function for records
- positions: keeps demon positions contiguous
- demons: demon validation and mutations
- players: player resolution, claims and aggregate scores
- video: video URL validation
- submission: the record submission pipeline
- record_status: record status transitions
"""
