"""Boutique en ligne: tunnel de commande, paiements Razorpay, commandes Supabase et emails."""
