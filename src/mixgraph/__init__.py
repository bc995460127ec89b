# MixGraph: harmonic DJ set sequencing and transition insights
# Package: mixgraph

__version__ = "1.0.0-dev"
__author__ = "MixGraph Contributors"
__description__ = "Greedy DJ set builder driven by key, tempo and transition history"

# Module structure:
#   - mixgraph.analyze  : Key normalization/compatibility, batch metadata lookup
#   - mixgraph.generate : Transition graph, scoring, sequencing, styling, insights
#   - mixgraph.export   : Rekordbox XML, VirtualDJ CSV and M3U output
#   - mixgraph.stores   : Store interfaces and in-memory implementation
#   - mixgraph.db       : SQLite-backed stores
#   - mixgraph.session  : Editable playlist session with debounced auto-save
#   - mixgraph.config   : Configuration management
