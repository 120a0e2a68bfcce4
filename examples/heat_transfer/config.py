import os


#######################################################################################################################
######################################## PROBLEM CONFIGURATION ########################################################
#######################################################################################################################

root = os.path.dirname(os.path.abspath(__file__))

problem_name = "HeatTransfer"

# specifics of the high-fidelity problem
fom_specifics = {'number_of_nodes': 200,
                 'final_time': 0.5,
                 'number_of_time_instances': 50,
                 'theta': 1.0}  # 1.0 --> Backward Euler, 0.5 --> Crank-Nicolson

# parameter range: conductivities of the two subdomains
param_min = [0.1, 0.1]
param_max = [1.0, 1.0]

#######################################################################################################################
######################################## OFFLINE PHASE CONFIGURATION ##################################################
#######################################################################################################################

training_params = [[0.1, 0.1], [1.0, 0.1], [0.1, 1.0], [1.0, 1.0], [0.5, 0.5]]  # parameters of the snapshots
snapshots_time_subsample = 10  # one snapshot every 'snapshots_time_subsample' time steps
N_max = 12  # maximal basis size

IMPORT_OFFLINE_QUANTITIES = False  # import the offline quantities from 'offline_data_directory'
SAVE_OFFLINE_QUANTITIES = True  # save the offline quantities to 'offline_data_directory'
CLEAR_RIESZ_REPRESENTORS = True  # release the Riesz representors at the end of the offline phase

offline_data_directory = os.path.join(root, "offline_data")

#######################################################################################################################
######################################## ONLINE PHASE CONFIGURATION ###################################################
#######################################################################################################################

test_params = [[0.3, 0.8], [0.75, 0.2]]  # parameters for the online evaluation
test_N = [2, 6, 12]  # basis sizes for the online evaluation
